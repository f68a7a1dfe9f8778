"""Reconciliation adjustment ledger."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rentledger.core.errors import NotFoundError, StoreError, ValidationError
from rentledger.core.money import MoneyInput, parse_brl
from rentledger.models import Account, MarcoZero, ReconciliationAdjustment
from rentledger.obs.metrics import ADJUSTMENTS_COUNTER

logger = logging.getLogger(__name__)

MIN_DESCRIPTION_LENGTH = 10
MAX_BANK_REFERENCE_LENGTH = 100


@dataclass(slots=True, frozen=True)
class AdjustmentDraft:
    """Unvalidated input for a new adjustment."""

    adjustment_date: date | None
    amount: MoneyInput | None
    type: str | None
    description: str | None
    account_id: int | None = None
    marco_zero_id: int | None = None
    bank_reference: str | None = None


def validate_draft(draft: AdjustmentDraft, *, today: date) -> tuple[Decimal, str, str]:
    """Check the business rules and return the normalized amount, type and description."""
    if draft.amount is None or (isinstance(draft.amount, str) and not draft.amount.strip()):
        raise ValidationError("Amount is required", field="amount")
    try:
        amount = parse_brl(draft.amount)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Amount '{draft.amount}' is not a valid number", field="amount") from exc

    description = (draft.description or "").strip()
    if not description:
        raise ValidationError("Description is required", field="description")
    if len(description) < MIN_DESCRIPTION_LENGTH:
        raise ValidationError(
            f"Description must have at least {MIN_DESCRIPTION_LENGTH} characters",
            field="description",
        )

    if draft.adjustment_date is None:
        raise ValidationError("Adjustment date is required", field="adjustmentDate")
    if draft.adjustment_date > today:
        raise ValidationError("Adjustment date cannot be in the future", field="adjustmentDate")

    adjustment_type = (draft.type or "").strip()
    if not adjustment_type:
        raise ValidationError("Adjustment type is required", field="type")

    if draft.bank_reference and len(draft.bank_reference) > MAX_BANK_REFERENCE_LENGTH:
        raise ValidationError(
            f"Bank reference must have at most {MAX_BANK_REFERENCE_LENGTH} characters",
            field="bankReference",
        )
    return amount, adjustment_type, description


class ReconciliationService:
    """Create, list and delete manual balance adjustments."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, draft: AdjustmentDraft, *, today: date) -> ReconciliationAdjustment:
        amount, adjustment_type, description = validate_draft(draft, today=today)
        if draft.account_id is not None and self._session.get(Account, draft.account_id) is None:
            raise NotFoundError(f"Account '{draft.account_id}' was not found")
        if draft.marco_zero_id is not None and self._session.get(MarcoZero, draft.marco_zero_id) is None:
            raise NotFoundError(f"Baseline '{draft.marco_zero_id}' was not found")

        adjustment = ReconciliationAdjustment(
            adjustment_date=draft.adjustment_date,
            amount=amount,
            type=adjustment_type,
            description=description,
            account_id=draft.account_id,
            marco_zero_id=draft.marco_zero_id,
            bank_reference=(draft.bank_reference or "").strip() or None,
        )
        self._session.add(adjustment)
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError("Failed to store reconciliation adjustment") from exc
        self._session.refresh(adjustment)

        ADJUSTMENTS_COUNTER.labels(operation="create").inc()
        logger.info("Adjustment %s of %s (%s) recorded for %s", adjustment.id, amount, adjustment_type, draft.adjustment_date)
        return adjustment

    def list(self, marco_zero_id: int | None = None) -> list[ReconciliationAdjustment]:
        stmt = select(ReconciliationAdjustment).order_by(
            ReconciliationAdjustment.adjustment_date.desc(), ReconciliationAdjustment.id.desc()
        )
        if marco_zero_id is not None:
            stmt = stmt.where(ReconciliationAdjustment.marco_zero_id == marco_zero_id)
        try:
            return list(self._session.scalars(stmt))
        except SQLAlchemyError as exc:
            raise StoreError("Failed to list reconciliation adjustments") from exc

    def delete(self, adjustment_id: int) -> None:
        adjustment = self._session.get(ReconciliationAdjustment, adjustment_id)
        if adjustment is None:
            raise NotFoundError(f"Adjustment '{adjustment_id}' was not found")
        self._session.delete(adjustment)
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StoreError("Failed to delete reconciliation adjustment") from exc
        ADJUSTMENTS_COUNTER.labels(operation="delete").inc()
        logger.info("Adjustment %s deleted", adjustment_id)


__all__ = [
    "AdjustmentDraft",
    "MAX_BANK_REFERENCE_LENGTH",
    "MIN_DESCRIPTION_LENGTH",
    "ReconciliationService",
    "validate_draft",
]
