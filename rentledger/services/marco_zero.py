"""Baseline ("Marco Zero") management."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from rentledger.core.errors import StoreError, ValidationError
from rentledger.core.money import money_sum, parse_brl, quantize
from rentledger.models import Account, MarcoZero
from rentledger.obs.metrics import BASELINES_SET_COUNTER
from rentledger.obs.tracing import ledger_span

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AccountBalance:
    """Balance of one account at the baseline date."""

    account_id: int
    account_name: str
    balance: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "balance", quantize(self.balance))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object]) -> "AccountBalance":
        try:
            account_id = raw.get("accountId", raw.get("account_id"))
            name = raw.get("accountName", raw.get("account_name")) or ""
            return cls(account_id=int(account_id), account_name=str(name), balance=parse_brl(raw["balance"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid account balance entry: {dict(raw)!r}", field="accountBalances") from exc

    def to_dict(self) -> dict[str, object]:
        return {"accountId": self.account_id, "accountName": self.account_name, "balance": str(self.balance)}


@contextmanager
def _serializable_transaction(session: Session) -> Iterator[None]:
    """Run the block in a SERIALIZABLE transaction (``BEGIN IMMEDIATE`` on SQLite)."""

    bind = session.get_bind()
    if bind is None:
        raise RuntimeError("Session is not bound to an engine")

    if bind.dialect.name == "sqlite":
        session.execute(text("BEGIN IMMEDIATE"))
    else:
        session.execute(text("SET TRANSACTION ISOLATION LEVEL SERIALIZABLE"))

    try:
        yield
        session.commit()
    except Exception:
        session.rollback()
        raise


class MarcoZeroService:
    """Reads and replaces the single active baseline."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_active(self) -> MarcoZero | None:
        stmt = select(MarcoZero).where(MarcoZero.is_active.is_(True)).order_by(MarcoZero.id.desc()).limit(1)
        try:
            return self._session.scalars(stmt).first()
        except SQLAlchemyError as exc:
            raise StoreError("Failed to load the active baseline") from exc

    def get_history(self) -> list[MarcoZero]:
        stmt = select(MarcoZero).order_by(MarcoZero.created_at.desc(), MarcoZero.id.desc())
        try:
            return list(self._session.scalars(stmt))
        except SQLAlchemyError as exc:
            raise StoreError("Failed to load baseline history") from exc

    def set_baseline(
        self,
        marco_date: date,
        account_balances: Iterable[AccountBalance | Mapping[str, object]],
        notes: str | None = None,
    ) -> MarcoZero:
        """Deactivate the current baseline and activate a new one, atomically.

        Zero balances are dropped. The new baseline's balances are written
        through to the matching accounts.
        """
        balances = [
            item if isinstance(item, AccountBalance) else AccountBalance.from_mapping(item)
            for item in account_balances
        ]
        balances = [item for item in balances if item.balance != 0]
        if not balances:
            raise ValidationError("At least one non-zero account balance is required", field="accountBalances")
        total = money_sum(item.balance for item in balances)

        # The deactivation runs before the insert so the single-active index never sees two rows.
        try:
            span = ledger_span("marco_zero.set", marco_date=str(marco_date), accounts=len(balances))
            with span, _serializable_transaction(self._session):
                self._session.execute(
                    update(MarcoZero)
                    .where(MarcoZero.is_active.is_(True))
                    .values(is_active=False, deactivated_at=datetime.now(timezone.utc))
                )
                baseline = MarcoZero(
                    marco_date=marco_date,
                    account_balances=[item.to_dict() for item in balances],
                    total_balance=total,
                    notes=notes,
                    is_active=True,
                )
                self._session.add(baseline)
                self._write_through(balances)
                self._session.flush()
        except IntegrityError as exc:
            BASELINES_SET_COUNTER.labels(outcome="conflict").inc()
            raise StoreError("Another baseline was activated concurrently") from exc
        except SQLAlchemyError as exc:
            BASELINES_SET_COUNTER.labels(outcome="error").inc()
            logger.exception("Failed to set baseline for %s", marco_date)
            raise StoreError("Failed to set baseline") from exc

        self._session.refresh(baseline)
        BASELINES_SET_COUNTER.labels(outcome="ok").inc()
        logger.info(
            "Baseline %s activated for %s with total %s across %d accounts",
            baseline.id,
            marco_date,
            total,
            len(balances),
        )
        return baseline

    def _write_through(self, balances: list[AccountBalance]) -> None:
        for item in balances:
            account = self._session.get(Account, item.account_id)
            if account is None:
                logger.debug("Skipping balance write-through for unknown account %s", item.account_id)
                continue
            account.initial_balance = item.balance
            account.current_balance = item.balance


__all__ = ["AccountBalance", "MarcoZeroService"]
