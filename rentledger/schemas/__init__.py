"""Pydantic schemas package."""

from .analytics import (
    MarginReportRead,
    PivotRowRead,
    PivotTableRead,
    PropertyMarginRead,
    SingleMonthRead,
    SingleMonthRowRead,
    SortRead,
    TransactionRecordRead,
)
from .cash_flow import (
    BalanceRead,
    CashFlowProjectionRead,
    CashFlowReportRead,
    CashFlowStatsRead,
    CashFlowSummaryRead,
    CategoryShareRead,
    DailyCashFlowRead,
    IpcaCorrectionRead,
    MonthlyTrendRead,
    ProjectedCategoryRead,
    ProjectedMonthRead,
    TypeTotalsRead,
)
from .common import CamelModel
from .marco_zero import AccountBalanceItem, MarcoZeroCreate, MarcoZeroRead
from .reconciliation import ReconciliationCreate, ReconciliationRead

__all__ = [
    "AccountBalanceItem",
    "BalanceRead",
    "CamelModel",
    "CashFlowProjectionRead",
    "CashFlowReportRead",
    "CashFlowStatsRead",
    "CashFlowSummaryRead",
    "CategoryShareRead",
    "DailyCashFlowRead",
    "IpcaCorrectionRead",
    "MarcoZeroCreate",
    "MarcoZeroRead",
    "MarginReportRead",
    "MonthlyTrendRead",
    "PivotRowRead",
    "PivotTableRead",
    "ProjectedCategoryRead",
    "ProjectedMonthRead",
    "PropertyMarginRead",
    "ReconciliationCreate",
    "ReconciliationRead",
    "SingleMonthRead",
    "SingleMonthRowRead",
    "SortRead",
    "TransactionRecordRead",
    "TypeTotalsRead",
]
