"""Schemas for cash-flow and IPCA responses."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import field_validator

from rentledger.models import TransactionType
from rentledger.schemas.common import CamelModel


class BalanceRead(CamelModel):
    target_date: dt.date
    balance: Decimal
    marco_zero_id: int | None
    marco_date: dt.date | None
    movement_count: int


class DailyCashFlowRead(CamelModel):
    date: dt.date
    revenue: Decimal
    expenses: Decimal
    adjustments: Decimal
    net_flow: Decimal
    balance: Decimal


class CashFlowSummaryRead(CamelModel):
    opening_balance: Decimal
    closing_balance: Decimal
    total_revenue: Decimal
    total_expenses: Decimal
    total_adjustments: Decimal
    net_cash_flow: Decimal
    average_daily_flow: Decimal
    positive_days: int
    negative_days: int


class CashFlowReportRead(CamelModel):
    start: dt.date
    end: dt.date
    marco_zero_id: int | None
    days: list[DailyCashFlowRead]
    summary: CashFlowSummaryRead


class TypeTotalsRead(CamelModel):
    revenue: Decimal
    expenses: Decimal
    net_flow: Decimal
    revenue_count: int
    expense_count: int


class CategoryShareRead(CamelModel):
    type: TransactionType
    category: str
    amount: Decimal
    count: int
    percentage: Decimal | None


class MonthlyTrendRead(CamelModel):
    month: str
    revenue: Decimal
    expenses: Decimal
    net_flow: Decimal
    margin: Decimal | None


class CashFlowStatsRead(CamelModel):
    """Ratios and margins are percentages; they are null when revenue is zero."""

    start: dt.date | None
    end: dt.date | None
    totals: TypeTotalsRead
    expense_to_revenue_ratio: Decimal | None
    profit_margin: Decimal | None
    categories: list[CategoryShareRead]
    monthly_trends: list[MonthlyTrendRead]
    average_monthly_revenue: Decimal
    average_monthly_expenses: Decimal
    average_monthly_net_flow: Decimal


class ProjectedCategoryRead(CamelModel):
    type: TransactionType
    category: str
    projected_amount: Decimal


class ProjectedMonthRead(CamelModel):
    month: str
    revenue: Decimal
    expenses: Decimal
    net_flow: Decimal
    balance: Decimal
    categories: list[ProjectedCategoryRead]


class CashFlowProjectionRead(CamelModel):
    current_balance: Decimal
    months: int
    history_start: dt.date
    history_end: dt.date
    projections: list[ProjectedMonthRead]
    total_revenue: Decimal
    total_expenses: Decimal
    total_net_flow: Decimal
    final_balance: Decimal


class IpcaCorrectionRead(CamelModel):
    """Outcome of one correction. ``available`` is false when IBGE could not be used."""

    available: bool
    original_value: Decimal
    corrected_value: Decimal | None = None
    correction_factor: Decimal | None = None
    correction_percentage: Decimal | None = None
    reference_month: str | None = None
    month_count: int = 0

    @field_validator("reference_month", mode="before")
    @classmethod
    def _month_key(cls, value: object) -> str | None:
        return None if value is None else str(value)


__all__ = [
    "BalanceRead",
    "CashFlowProjectionRead",
    "CashFlowReportRead",
    "CashFlowStatsRead",
    "CashFlowSummaryRead",
    "CategoryShareRead",
    "DailyCashFlowRead",
    "IpcaCorrectionRead",
    "MonthlyTrendRead",
    "ProjectedCategoryRead",
    "ProjectedMonthRead",
    "TypeTotalsRead",
]
