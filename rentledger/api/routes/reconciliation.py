"""Reconciliation adjustment endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from rentledger.api.deps import get_db_session, get_reference_clock, service_errors
from rentledger.core.clock import ReferenceClock
from rentledger.schemas import ReconciliationCreate, ReconciliationRead
from rentledger.services.reconciliation import AdjustmentDraft, ReconciliationService

router = APIRouter(prefix="/reconciliation")


@router.post("", response_model=ReconciliationRead, status_code=status.HTTP_201_CREATED)
def create_adjustment(
    payload: ReconciliationCreate,
    session: Session = Depends(get_db_session),
    clock: ReferenceClock = Depends(get_reference_clock),
) -> ReconciliationRead:
    draft = AdjustmentDraft(
        adjustment_date=payload.adjustment_date,
        amount=payload.amount,
        type=payload.type,
        description=payload.description,
        account_id=payload.account_id,
        marco_zero_id=payload.marco_zero_id,
        bank_reference=payload.bank_reference,
    )
    with service_errors():
        adjustment = ReconciliationService(session).create(draft, today=clock.today)
    return ReconciliationRead.model_validate(adjustment)


@router.get("", response_model=list[ReconciliationRead])
def list_adjustments(
    marco_zero_id: int | None = Query(default=None, alias="marcoZeroId"),
    session: Session = Depends(get_db_session),
) -> list[ReconciliationRead]:
    with service_errors():
        adjustments = ReconciliationService(session).list(marco_zero_id=marco_zero_id)
    return [ReconciliationRead.model_validate(item) for item in adjustments]


@router.delete("/{adjustment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_adjustment(adjustment_id: int, session: Session = Depends(get_db_session)) -> Response:
    with service_errors():
        ReconciliationService(session).delete(adjustment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["create_adjustment", "delete_adjustment", "list_adjustments", "router"]
