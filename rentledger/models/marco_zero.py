"""Marco Zero (financial baseline) ORM model."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, DateTime, Index, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.models.base import Base, CreatedAtMixin, Money


class MarcoZero(CreatedAtMixin, Base):
    """Point-in-time snapshot of account balances anchoring cash-flow figures.

    Baselines are never deleted; declaring a new one deactivates the previous
    active row. The partial unique index keeps at most one active row.
    """

    __tablename__ = "marco_zero"
    __table_args__ = (
        Index(
            "uq_marco_zero_single_active",
            "is_active",
            unique=True,
            sqlite_where=text("is_active = 1"),
            postgresql_where=text("is_active"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    marco_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    account_balances: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    total_balance: Mapped[Decimal] = mapped_column(Money, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    deactivated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True))

    adjustments = relationship("ReconciliationAdjustment", back_populates="marco_zero")


__all__ = ["MarcoZero"]
