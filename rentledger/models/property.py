"""Property ORM model."""
from __future__ import annotations

import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentledger.core.money import money_sum
from rentledger.models.base import Base, Money, TimestampMixin


class PropertyStatus(str, enum.Enum):
    ACTIVE = "active"
    DECORATION = "decoration"
    FINANCING = "financing"
    INACTIVE = "inactive"


class Property(TimestampMixin, Base):
    """A rental unit together with its acquisition cost breakdown."""

    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    nickname: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[PropertyStatus] = mapped_column(
        SAEnum(PropertyStatus, name="property_status", values_callable=lambda enum_: [m.value for m in enum_]),
        nullable=False,
        default=PropertyStatus.ACTIVE,
    )

    purchase_price: Mapped[Decimal | None] = mapped_column(Money)
    commission_value: Mapped[Decimal | None] = mapped_column(Money)
    taxes_and_registration: Mapped[Decimal | None] = mapped_column(Money)
    renovation_and_decoration: Mapped[Decimal | None] = mapped_column(Money)
    other_initial_values: Mapped[Decimal | None] = mapped_column(Money)
    purchase_date: Mapped[date | None] = mapped_column(Date)

    transactions = relationship("Transaction", back_populates="rental_property")

    @property
    def acquisition_cost(self) -> Decimal:
        """Sum of the recorded acquisition cost components."""
        return money_sum(
            component
            for component in (
                self.purchase_price,
                self.commission_value,
                self.taxes_and_registration,
                self.renovation_and_decoration,
                self.other_initial_values,
            )
            if component is not None
        )


__all__ = ["Property", "PropertyStatus"]
