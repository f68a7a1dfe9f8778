"""Analytics endpoints: period pivots, IPCA margins and single-month detail."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rentledger.api.deps import (
    get_corrector,
    get_db_session,
    get_reference_clock,
    get_transaction_filter,
    service_errors,
    split_csv,
)
from rentledger.core.clock import ReferenceClock
from rentledger.schemas import MarginReportRead, PivotTableRead, SingleMonthRead, TransactionRecordRead
from rentledger.services.aggregation import SortState
from rentledger.services.analytics import AnalyticsService
from rentledger.services.filters import TransactionFilter
from rentledger.services.ipca_client import MonetaryCorrector

router = APIRouter(prefix="/analytics")


def _service(
    session: Session = Depends(get_db_session),
    clock: ReferenceClock = Depends(get_reference_clock),
    corrector: MonetaryCorrector = Depends(get_corrector),
) -> AnalyticsService:
    return AnalyticsService(session, clock=clock, corrector=corrector)


@router.get("/transactions-by-periods", response_model=list[TransactionRecordRead])
def transactions_by_periods(
    months: str | None = Query(default=None, description="Comma-separated MM/YYYY keys"),
    filters: TransactionFilter = Depends(get_transaction_filter),
    service: AnalyticsService = Depends(_service),
) -> list[TransactionRecordRead]:
    with service_errors():
        records = service.transactions_by_periods(split_csv(months), filters)
    return [TransactionRecordRead.from_record(record) for record in records]


@router.get("/pivot", response_model=PivotTableRead)
def pivot(
    months: str | None = Query(default=None),
    sort_key: str | None = Query(default=None, alias="sortKey"),
    sort_direction: str | None = Query(default=None, alias="sortDirection"),
    filters: TransactionFilter = Depends(get_transaction_filter),
    service: AnalyticsService = Depends(_service),
) -> PivotTableRead:
    with service_errors():
        sort = SortState.parse(sort_key, sort_direction)
        table = service.pivot(split_csv(months), filters, sort)
    return PivotTableRead.model_validate(table)


@router.get("/pivot-with-ipca", response_model=MarginReportRead)
def pivot_with_ipca(
    months: str | None = Query(default=None),
    filters: TransactionFilter = Depends(get_transaction_filter),
    service: AnalyticsService = Depends(_service),
) -> MarginReportRead:
    with service_errors():
        report = service.pivot_with_ipca(split_csv(months), filters)
    return MarginReportRead.model_validate(report)


@router.get("/single-month-detailed", response_model=SingleMonthRead)
def single_month_detailed(
    month: str | None = Query(default=None, description="MM/YYYY"),
    filters: TransactionFilter = Depends(get_transaction_filter),
    service: AnalyticsService = Depends(_service),
) -> SingleMonthRead:
    with service_errors():
        view = service.single_month_detailed(month or "", filters)
    return SingleMonthRead.model_validate(view)


@router.get("/available-months", response_model=list[str])
def available_months(service: AnalyticsService = Depends(_service)) -> list[str]:
    with service_errors():
        return service.available_months()


__all__ = [
    "available_months",
    "pivot",
    "pivot_with_ipca",
    "router",
    "single_month_detailed",
    "transactions_by_periods",
]
