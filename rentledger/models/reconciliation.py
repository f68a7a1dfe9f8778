"""Reconciliation adjustment ORM model."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models.base import Base, CreatedAtMixin, Money


class ReconciliationAdjustment(CreatedAtMixin, Base):
    """Manual correction applied on top of computed cash-flow balances."""

    __tablename__ = "reconciliation_adjustments"
    __table_args__ = (Index("ix_reconciliation_adjustments_date", "adjustment_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    marco_zero_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("marco_zero.id", ondelete="SET NULL"), nullable=True
    )
    account_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    adjustment_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    bank_reference: Mapped[str | None] = mapped_column(String(100))

    marco_zero = relationship("MarcoZero", back_populates="adjustments")


__all__ = ["ReconciliationAdjustment"]
