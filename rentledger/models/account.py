"""Bank account ORM model."""
from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from rentledger.models.base import Base, Money, TimestampMixin


class Account(TimestampMixin, Base):
    """Cash account whose balances are reset when a baseline is declared."""

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    bank_name: Mapped[str | None] = mapped_column(String(255))
    initial_balance: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0.00"))
    current_balance: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0.00"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


__all__ = ["Account"]
