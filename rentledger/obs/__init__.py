"""Observability utilities."""

from .audit import AuditLogRecord, AuditMiddleware
from .metrics import (
    ADJUSTMENTS_COUNTER,
    BASELINES_SET_COUNTER,
    CORRECTION_LOOKUP_COUNTER,
    REQUEST_COUNTER,
    REQUEST_ERROR_COUNTER,
    REQUEST_LATENCY_SECONDS,
    PrometheusMiddleware,
    metrics_router,
    record_correction_lookup,
)
from .tracing import (
    initialise_tracing,
    instrument_fastapi_app,
    instrument_sqlalchemy_engine,
    ledger_span,
)

__all__ = [
    "ADJUSTMENTS_COUNTER",
    "AuditLogRecord",
    "AuditMiddleware",
    "BASELINES_SET_COUNTER",
    "CORRECTION_LOOKUP_COUNTER",
    "PrometheusMiddleware",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "initialise_tracing",
    "instrument_fastapi_app",
    "instrument_sqlalchemy_engine",
    "ledger_span",
    "metrics_router",
    "record_correction_lookup",
]
