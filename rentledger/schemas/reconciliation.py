"""Schemas for reconciliation adjustments."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import field_validator

from rentledger.schemas.common import CamelModel, parse_user_amount


class ReconciliationCreate(CamelModel):
    # Everything is optional here; business rules are checked by the service
    # so that rejections name the rule that failed.
    adjustment_date: date | None = None
    amount: Decimal | None = None
    type: str | None = None
    description: str | None = None
    account_id: int | None = None
    marco_zero_id: int | None = None
    bank_reference: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _user_amount(cls, value: object) -> object:
        return parse_user_amount(value)


class ReconciliationRead(CamelModel):
    id: int
    adjustment_date: date
    amount: Decimal
    type: str
    description: str
    account_id: int | None
    marco_zero_id: int | None
    bank_reference: str | None
    created_at: datetime | None = None


__all__ = ["ReconciliationCreate", "ReconciliationRead"]
