"""Transaction ORM model."""
from __future__ import annotations

import enum
import datetime as dt
from decimal import Decimal

from sqlalchemy import Boolean, Date, Enum as SAEnum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models.base import Base, Money, TimestampMixin

# Future reservations imported ahead of payout carry this marker in their description.
PENDING_MARKER = "Reserva futura"


class TransactionType(str, enum.Enum):
    REVENUE = "revenue"
    EXPENSE = "expense"

    @property
    def complement(self) -> "TransactionType":
        return TransactionType.EXPENSE if self is TransactionType.REVENUE else TransactionType.REVENUE


class Transaction(TimestampMixin, Base):
    """Revenue or expense booked against a property."""

    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_property_id", "property_id"),
        Index("ix_transactions_date", "date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    property_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True
    )
    account_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(TransactionType, name="transaction_type", values_callable=lambda enum_: [m.value for m in enum_]),
        nullable=False,
    )
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    is_historical: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    rental_property = relationship("Property", back_populates="transactions")

    @property
    def is_pending(self) -> bool:
        return bool(self.description) and PENDING_MARKER in self.description


__all__ = ["PENDING_MARKER", "Transaction", "TransactionType"]
