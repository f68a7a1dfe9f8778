"""Baseline (Marco Zero) endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from rentledger.api.deps import get_db_session, service_errors
from rentledger.schemas import MarcoZeroCreate, MarcoZeroRead
from rentledger.services.marco_zero import AccountBalance, MarcoZeroService

router = APIRouter(prefix="/marco-zero")


@router.post("", response_model=MarcoZeroRead, status_code=status.HTTP_201_CREATED)
def set_marco_zero(payload: MarcoZeroCreate, session: Session = Depends(get_db_session)) -> MarcoZeroRead:
    """Declare a new baseline, deactivating the previous one."""

    balances = [
        AccountBalance(account_id=item.account_id, account_name=item.account_name, balance=item.balance)
        for item in payload.account_balances
    ]
    with service_errors():
        baseline = MarcoZeroService(session).set_baseline(payload.marco_date, balances, payload.notes)
    return MarcoZeroRead.model_validate(baseline)


@router.get("/active", response_model=MarcoZeroRead | None)
def get_active_marco_zero(session: Session = Depends(get_db_session)) -> MarcoZeroRead | None:
    with service_errors():
        baseline = MarcoZeroService(session).get_active()
    return MarcoZeroRead.model_validate(baseline) if baseline is not None else None


@router.get("/history", response_model=list[MarcoZeroRead])
def get_marco_zero_history(session: Session = Depends(get_db_session)) -> list[MarcoZeroRead]:
    with service_errors():
        history = MarcoZeroService(session).get_history()
    return [MarcoZeroRead.model_validate(item) for item in history]


__all__ = ["get_active_marco_zero", "get_marco_zero_history", "router", "set_marco_zero"]
