"""Seed script for demo properties, accounts and transactions."""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from rentledger.db.session import engine, get_session
from rentledger.models import Account, Base, Property, PropertyStatus, Transaction, TransactionType

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_PROPERTIES = [
    {
        "name": "Apartamento Sevilha 307",
        "nickname": "Sevilha 307",
        "purchase_price": Decimal("450000.00"),
        "commission_value": Decimal("22500.00"),
        "taxes_and_registration": Decimal("15800.00"),
        "renovation_and_decoration": Decimal("38000.00"),
        "purchase_date": date(2022, 3, 15),
    },
    {
        "name": "Casa Ibirapuera",
        "nickname": None,
        "purchase_price": Decimal("820000.00"),
        "taxes_and_registration": Decimal("29000.00"),
        "purchase_date": date(2021, 8, 2),
    },
    {
        "name": "Studio Málaga 1102",
        "nickname": "Málaga",
        "purchase_price": Decimal("310000.00"),
        "other_initial_values": Decimal("4500.00"),
        "purchase_date": date(2023, 11, 20),
    },
]

DEMO_ACCOUNTS = [
    {"name": "Conta corrente", "bank_name": "Banco do Brasil"},
    {"name": "Conta investimento", "bank_name": "Itaú"},
]


def _monthly_transactions(prop: Property, account: Account, year: int) -> list[Transaction]:
    rows: list[Transaction] = []
    for month in range(1, 13):
        rows.append(
            Transaction(
                property_id=prop.id,
                account_id=account.id,
                type=TransactionType.REVENUE,
                category="rent",
                amount=Decimal("3200.00") + month * 10,
                date=date(year, month, 5),
                description=f"Aluguel {month:02d}/{year}",
            )
        )
        rows.append(
            Transaction(
                property_id=prop.id,
                account_id=account.id,
                type=TransactionType.EXPENSE,
                category="condominium",
                amount=Decimal("780.50"),
                date=date(year, month, 10),
                description=f"Condomínio {month:02d}/{year}",
            )
        )
    return rows


def seed(session: Session, *, year: int | None = None) -> None:
    """Insert demo data unless properties already exist."""

    if session.scalars(select(Property).limit(1)).first() is not None:
        logger.info("Properties already present, skipping seed")
        return

    year = year or date.today().year
    properties = [Property(status=PropertyStatus.ACTIVE, **values) for values in DEMO_PROPERTIES]
    accounts = [Account(**values) for values in DEMO_ACCOUNTS]
    session.add_all([*properties, *accounts])
    session.flush()
    logger.info("Created %d properties and %d accounts", len(properties), len(accounts))

    for prop in properties:
        session.add_all(_monthly_transactions(prop, accounts[0], year))
    logger.info("Added monthly transactions for %d", year)


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with get_session() as session:
        seed(session)


if __name__ == "__main__":
    main()
