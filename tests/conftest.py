from __future__ import annotations

from collections.abc import Iterator
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rentledger.api.deps import get_corrector, get_db_session, get_reference_clock
from rentledger.core.clock import ReferenceClock
from rentledger.core.money import quantize, to_decimal
from rentledger.core.periods import PeriodKey
from rentledger.main import app
from rentledger.models import Account, Base, Property, Transaction, TransactionType
from rentledger.services.ipca_client import MonetaryCorrection

DATABASE_URL = "sqlite+pysqlite:///:memory:"

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

TODAY = date(2025, 3, 15)


class StubCorrector:
    """Applies a fixed correction factor and records every lookup."""

    def __init__(self, factor: Decimal = Decimal("1.10"), *, available: bool = True) -> None:
        self.factor = factor
        self.available = available
        self.calls: list[tuple[Decimal, date, date]] = []

    def correct(self, principal: Decimal, reference_date: date, *, as_of: date) -> MonetaryCorrection | None:
        self.calls.append((principal, reference_date, as_of))
        if not self.available:
            return None
        principal = to_decimal(principal)
        return MonetaryCorrection(
            original_value=quantize(principal),
            corrected_value=quantize(principal * self.factor),
            correction_factor=self.factor,
            reference_month=PeriodKey.from_date(reference_date),
            month_count=12,
        )


class LedgerFactory:
    """Small helper for inserting committed fixture rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def property(self, name: str, **values: object) -> Property:
        prop = Property(name=name, **values)
        self.session.add(prop)
        self.session.commit()
        return prop

    def account(self, name: str = "Conta corrente", **values: object) -> Account:
        account = Account(name=name, **values)
        self.session.add(account)
        self.session.commit()
        return account

    def transaction(
        self,
        prop: Property,
        amount: str,
        on: date,
        *,
        type: TransactionType = TransactionType.REVENUE,
        category: str = "rent",
        description: str | None = None,
        is_historical: bool = False,
    ) -> Transaction:
        txn = Transaction(
            property_id=prop.id,
            type=type,
            category=category,
            amount=Decimal(amount),
            date=on,
            description=description,
            is_historical=is_historical,
        )
        self.session.add(txn)
        self.session.commit()
        return txn


@pytest.fixture()
def db_session() -> Iterator[Session]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture()
def factory(db_session: Session) -> LedgerFactory:
    return LedgerFactory(db_session)


@pytest.fixture()
def clock() -> ReferenceClock:
    return ReferenceClock(today=TODAY)


@pytest.fixture()
def corrector() -> StubCorrector:
    return StubCorrector()


@pytest.fixture()
def client(db_session: Session, clock: ReferenceClock, corrector: StubCorrector) -> Iterator[TestClient]:
    def override_get_db() -> Iterator[Session]:
        try:
            yield db_session
        finally:
            db_session.rollback()

    app.dependency_overrides[get_db_session] = override_get_db
    app.dependency_overrides[get_reference_clock] = lambda: clock
    app.dependency_overrides[get_corrector] = lambda: corrector

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
