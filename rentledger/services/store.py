"""Read-only query helpers over properties, accounts and transactions."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from sqlalchemy import and_, extract, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rentledger.core.errors import StoreError
from rentledger.core.money import signed_amount
from rentledger.core.periods import PeriodKey
from rentledger.models import (
    Account,
    Property,
    ReconciliationAdjustment,
    Transaction,
    TransactionType,
)
from rentledger.services.filters import TransactionFilter


@dataclass(slots=True, frozen=True)
class TransactionRecord:
    """A transaction joined with its property's display name."""

    id: int
    property_id: int
    property_name: str
    type: TransactionType
    category: str
    amount: Decimal
    date: date
    description: str | None = None
    is_pending: bool = False

    @property
    def period(self) -> PeriodKey:
        return PeriodKey.from_date(self.date)

    @property
    def signed_amount(self) -> Decimal:
        return signed_amount(self.amount, self.type.value)


@dataclass(slots=True, frozen=True)
class CashMovement:
    """A dated signed amount feeding the cash-flow views."""

    date: date
    amount: Decimal
    kind: str  # "revenue", "expense" or "adjustment"


@dataclass(slots=True, frozen=True)
class LedgerEntry:
    """A transaction reduced to what the cash-flow statistics need."""

    date: date
    type: TransactionType
    category: str
    amount: Decimal


def _display_name():
    return func.coalesce(Property.nickname, Property.name)


def _period_clause(periods: Sequence[PeriodKey]):
    return or_(*(Transaction.date.between(p.first_day(), p.last_day()) for p in periods))


def fetch_transactions(
    session: Session,
    periods: Sequence[PeriodKey],
    filters: TransactionFilter | None = None,
) -> list[TransactionRecord]:
    """Return transactions dated inside ``periods`` that satisfy ``filters``.

    Ordered by property display name, then date and id. No periods means no rows.
    """
    if not periods:
        return []
    filters = filters or TransactionFilter()

    stmt = (
        select(Transaction, Property.id, _display_name())
        .join(Property, Transaction.property_id == Property.id)
        .where(_period_clause(periods))
        .order_by(_display_name(), Transaction.date, Transaction.id)
    )
    if filters.property_ids is not None:
        stmt = stmt.where(Property.id.in_(sorted(filters.property_ids)))
    if not filters.types.is_all:
        stmt = stmt.where(Transaction.type.in_(sorted(filters.types.types, key=lambda item: item.value)))
    if filters.categories is not None:
        stmt = stmt.where(Transaction.category.in_(sorted(filters.categories)))

    try:
        rows = session.execute(stmt).all()
    except SQLAlchemyError as exc:
        raise StoreError("Failed to load transactions") from exc

    return [
        TransactionRecord(
            id=txn.id,
            property_id=property_id,
            property_name=name,
            type=txn.type,
            category=txn.category,
            amount=txn.amount,
            date=txn.date,
            description=txn.description,
            is_pending=txn.is_pending,
        )
        for txn, property_id, name in rows
    ]


def fetch_properties(session: Session, property_ids: Iterable[int] | None = None) -> dict[int, Property]:
    stmt = select(Property)
    if property_ids is not None:
        stmt = stmt.where(Property.id.in_(list(property_ids)))
    try:
        return {prop.id: prop for prop in session.scalars(stmt)}
    except SQLAlchemyError as exc:
        raise StoreError("Failed to load properties") from exc


def available_months(session: Session) -> list[PeriodKey]:
    """Distinct months that have at least one transaction, newest first."""
    year = extract("year", Transaction.date)
    month = extract("month", Transaction.date)
    stmt = select(year, month).distinct()
    try:
        rows = session.execute(stmt).all()
    except SQLAlchemyError as exc:
        raise StoreError("Failed to list available months") from exc
    return sorted((PeriodKey(int(y), int(m)) for y, m in rows), reverse=True)


def fetch_cash_movements(
    session: Session,
    *,
    start: date | None,
    end: date,
) -> list[CashMovement]:
    """Non-historical transactions and reconciliation adjustments dated in ``[start, end]``.

    ``start=None`` leaves the range open on the left. Results are ordered by date,
    transactions before adjustments on the same day.
    """
    txn_conditions = [Transaction.is_historical.is_(False), Transaction.date <= end]
    adj_conditions = [ReconciliationAdjustment.adjustment_date <= end]
    if start is not None:
        txn_conditions.append(Transaction.date >= start)
        adj_conditions.append(ReconciliationAdjustment.adjustment_date >= start)

    try:
        transactions = session.execute(
            select(Transaction.date, Transaction.type, Transaction.amount)
            .where(and_(*txn_conditions))
            .order_by(Transaction.date, Transaction.id)
        ).all()
        adjustments = session.execute(
            select(ReconciliationAdjustment.adjustment_date, ReconciliationAdjustment.amount)
            .where(and_(*adj_conditions))
            .order_by(ReconciliationAdjustment.adjustment_date, ReconciliationAdjustment.id)
        ).all()
    except SQLAlchemyError as exc:
        raise StoreError("Failed to load cash movements") from exc

    movements = [
        CashMovement(date=txn_date, amount=signed_amount(amount, txn_type.value), kind=txn_type.value)
        for txn_date, txn_type, amount in transactions
    ]
    movements.extend(CashMovement(date=adj_date, amount=amount, kind="adjustment") for adj_date, amount in adjustments)
    movements.sort(key=lambda movement: (movement.date, movement.kind == "adjustment"))
    return movements


def fetch_ledger_entries(session: Session, *, start: date | None = None, end: date | None = None) -> list[LedgerEntry]:
    """Every transaction dated in ``[start, end]``, oldest first. ``None`` leaves that side open."""
    stmt = select(Transaction.date, Transaction.type, Transaction.category, Transaction.amount)
    if start is not None:
        stmt = stmt.where(Transaction.date >= start)
    if end is not None:
        stmt = stmt.where(Transaction.date <= end)
    try:
        rows = session.execute(stmt.order_by(Transaction.date, Transaction.id)).all()
    except SQLAlchemyError as exc:
        raise StoreError("Failed to load ledger entries") from exc
    return [LedgerEntry(date=day, type=kind, category=category, amount=amount) for day, kind, category, amount in rows]


def account_initial_balances(session: Session) -> list[Decimal]:
    try:
        return list(session.scalars(select(Account.initial_balance).where(Account.is_active.is_(True))))
    except SQLAlchemyError as exc:
        raise StoreError("Failed to load account balances") from exc


__all__ = [
    "CashMovement",
    "LedgerEntry",
    "TransactionRecord",
    "available_months",
    "fetch_cash_movements",
    "fetch_ledger_entries",
    "fetch_properties",
    "fetch_transactions",
    "account_initial_balances",
]
