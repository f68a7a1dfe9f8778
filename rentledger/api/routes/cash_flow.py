"""Cash-flow and monetary correction endpoints."""
from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rentledger.api.deps import get_corrector, get_db_session, get_reference_clock, service_errors
from rentledger.core.clock import ReferenceClock
from rentledger.core.errors import ValidationError
from rentledger.core.money import quantize
from rentledger.schemas import (
    BalanceRead,
    CashFlowProjectionRead,
    CashFlowReportRead,
    CashFlowStatsRead,
    IpcaCorrectionRead,
)
from rentledger.services.cash_flow import CashFlowService
from rentledger.services.ipca_client import MonetaryCorrector

router = APIRouter(prefix="/cash-flow")
ipca_router = APIRouter(prefix="/ipca")


@router.get("/balance", response_model=BalanceRead)
def balance(
    target_date: date | None = Query(default=None, alias="date"),
    session: Session = Depends(get_db_session),
    clock: ReferenceClock = Depends(get_reference_clock),
) -> BalanceRead:
    """Balance at the end of ``date`` (today by default), anchored on the active baseline."""
    with service_errors():
        snapshot = CashFlowService(session, clock=clock).balance_as_of(target_date)
    return BalanceRead.model_validate(snapshot)


@router.get("/daily", response_model=CashFlowReportRead)
def daily(
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    session: Session = Depends(get_db_session),
    clock: ReferenceClock = Depends(get_reference_clock),
) -> CashFlowReportRead:
    with service_errors():
        report = CashFlowService(session, clock=clock).daily_cash_flow(start_date, end_date)
    return CashFlowReportRead.model_validate(report)


@router.get("/stats", response_model=CashFlowStatsRead)
def stats(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    session: Session = Depends(get_db_session),
    clock: ReferenceClock = Depends(get_reference_clock),
) -> CashFlowStatsRead:
    """Revenue and expense totals, category shares and monthly trends."""
    with service_errors():
        result = CashFlowService(session, clock=clock).cash_flow_stats(start_date, end_date)
    return CashFlowStatsRead.model_validate(result)


@router.get("/projection", response_model=CashFlowProjectionRead)
def projection(
    months: int = Query(default=3),
    session: Session = Depends(get_db_session),
    clock: ReferenceClock = Depends(get_reference_clock),
) -> CashFlowProjectionRead:
    with service_errors():
        result = CashFlowService(session, clock=clock).project(months)
    return CashFlowProjectionRead.model_validate(result)


@ipca_router.get("/calculate", response_model=IpcaCorrectionRead)
def calculate_ipca(
    value: Decimal | None = Query(default=None, description="Amount to correct"),
    initial_value: Decimal | None = Query(default=None, alias="initialValue"),
    purchase_date: date = Query(..., alias="purchaseDate"),
    clock: ReferenceClock = Depends(get_reference_clock),
    corrector: MonetaryCorrector = Depends(get_corrector),
) -> IpcaCorrectionRead:
    """Correct ``value`` (or ``initialValue``) by IPCA from ``purchaseDate`` to last month."""
    with service_errors():
        amount = value if value is not None else initial_value
        if amount is None:
            raise ValidationError("Either value or initialValue is required", field="value")
        correction = corrector.correct(amount, purchase_date, as_of=clock.today)
    if correction is None:
        return IpcaCorrectionRead(available=False, original_value=quantize(amount))
    return IpcaCorrectionRead(
        available=True,
        original_value=correction.original_value,
        corrected_value=correction.corrected_value,
        correction_factor=correction.correction_factor,
        correction_percentage=correction.correction_percentage,
        reference_month=correction.reference_month,
        month_count=correction.month_count,
    )


__all__ = ["balance", "calculate_ipca", "daily", "ipca_router", "projection", "router", "stats"]
