"""Schemas for baseline resources."""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, field_validator

from rentledger.schemas.common import CamelModel, parse_user_amount


class AccountBalanceItem(CamelModel):
    account_id: int
    account_name: str = Field(default="", max_length=255)
    balance: Decimal

    @field_validator("balance", mode="before")
    @classmethod
    def _user_balance(cls, value: object) -> object:
        return parse_user_amount(value)


class MarcoZeroCreate(CamelModel):
    """Payload declaring a new baseline."""

    marco_date: date
    account_balances: list[AccountBalanceItem] = Field(default_factory=list)
    notes: str | None = None


class MarcoZeroRead(CamelModel):
    id: int
    marco_date: date
    account_balances: list[AccountBalanceItem]
    total_balance: Decimal
    notes: str | None
    is_active: bool
    created_at: datetime | None = None
    deactivated_at: datetime | None = None


__all__ = ["AccountBalanceItem", "MarcoZeroCreate", "MarcoZeroRead"]
