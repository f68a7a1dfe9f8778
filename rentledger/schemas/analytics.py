"""Schemas for analytics responses."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import field_validator

from rentledger.models import TransactionType
from rentledger.schemas.common import CamelModel
from rentledger.services.aggregation import SortDirection
from rentledger.services.store import TransactionRecord


class TransactionRecordRead(CamelModel):
    id: int
    property_id: int
    property_name: str
    month: int
    year: int
    date: dt.date
    type: TransactionType
    category: str
    amount: Decimal
    description: str | None
    is_pending: bool

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "TransactionRecordRead":
        return cls(
            id=record.id,
            property_id=record.property_id,
            property_name=record.property_name,
            month=record.date.month,
            year=record.date.year,
            date=record.date,
            type=record.type,
            category=record.category,
            amount=record.amount,
            description=record.description,
            is_pending=record.is_pending,
        )


class SortRead(CamelModel):
    key: str
    direction: SortDirection


class PivotRowRead(CamelModel):
    property_id: int
    property_name: str
    monthly_data: dict[str, Decimal]
    total: Decimal
    monthly_average: Decimal
    real_amount: Decimal | None = None
    pending_amount: Decimal | None = None


class SingleMonthRowRead(CamelModel):
    property_id: int
    property_name: str
    real_amount: Decimal
    pending_amount: Decimal
    total_result: Decimal
    original_cost: Decimal | None
    corrected_cost: Decimal | None
    profit_margin: Decimal | None


class SingleMonthRead(CamelModel):
    """Real/pending split for one month. ``None`` margins render as "–"."""

    period: str
    rows: list[SingleMonthRowRead]
    total_real: Decimal
    total_pending: Decimal
    total_result: Decimal
    total_corrected_cost: Decimal
    weighted_margin: Decimal | None

    @field_validator("period", mode="before")
    @classmethod
    def _period_key(cls, value: object) -> str:
        return str(value)


class PivotTableRead(CamelModel):
    month_headers: list[str]
    rows: list[PivotRowRead]
    column_totals: dict[str, Decimal]
    grand_total: Decimal
    grand_average: Decimal
    sort: SortRead
    single_month: SingleMonthRead | None = None


class PropertyMarginRead(CamelModel):
    property_id: int
    property_name: str
    revenue: Decimal
    expenses: Decimal
    net_result: Decimal
    original_acquisition_cost: Decimal
    ipca_corrected_acquisition_cost: Decimal | None
    profit_margin_original: Decimal | None
    profit_margin_ipca: Decimal | None
    ipca_correction: Decimal | None


class MarginReportRead(CamelModel):
    months: list[str]
    rows: list[PropertyMarginRead]
    total_net_result: Decimal
    total_corrected_cost: Decimal
    weighted_margin: Decimal | None


__all__ = [
    "MarginReportRead",
    "PivotRowRead",
    "PivotTableRead",
    "PropertyMarginRead",
    "SingleMonthRead",
    "SingleMonthRowRead",
    "SortRead",
    "TransactionRecordRead",
]
