"""Prometheus metrics for the ledger API."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

REQUEST_LATENCY_SECONDS = Histogram(
    "rentledger_http_request_latency_seconds",
    "Latency of HTTP requests in seconds.",
    labelnames=("method", "route"),
)
REQUEST_COUNTER = Counter(
    "rentledger_http_requests_total",
    "Total number of HTTP requests processed.",
    labelnames=("method", "route", "status"),
)
REQUEST_ERROR_COUNTER = Counter(
    "rentledger_http_request_errors_total",
    "Total number of HTTP requests that resulted in server errors.",
    labelnames=("method", "route", "status"),
)
BASELINES_SET_COUNTER = Counter(
    "rentledger_marco_zero_set_total",
    "Baselines declared, by outcome.",
    labelnames=("outcome",),
)
ADJUSTMENTS_COUNTER = Counter(
    "rentledger_reconciliation_adjustments_total",
    "Reconciliation adjustments written, by operation.",
    labelnames=("operation",),
)
CORRECTION_LOOKUP_COUNTER = Counter(
    "rentledger_ipca_lookups_total",
    "IPCA correction lookups, by outcome.",
    labelnames=("outcome",),
)


def _route_template(request: Request) -> str:
    # Label by route template so path ids do not explode cardinality.
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware that records request metrics for Prometheus scraping."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:  # type: ignore[override]
        method = request.method
        start_time = time.perf_counter()
        status = "500"

        try:
            response = await call_next(request)
            status = str(response.status_code)
            if response.status_code >= 500:
                REQUEST_ERROR_COUNTER.labels(method=method, route=_route_template(request), status=status).inc()
            return response
        except Exception:
            REQUEST_ERROR_COUNTER.labels(method=method, route=_route_template(request), status="500").inc()
            raise
        finally:
            route = _route_template(request)
            REQUEST_LATENCY_SECONDS.labels(method=method, route=route).observe(time.perf_counter() - start_time)
            REQUEST_COUNTER.labels(method=method, route=route, status=status).inc()


metrics_router = APIRouter(tags=["observability"])


@metrics_router.get("/metrics", include_in_schema=False)
def metrics_endpoint() -> Response:
    """Expose Prometheus metrics for scraping."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_correction_lookup(outcome: str) -> None:
    CORRECTION_LOOKUP_COUNTER.labels(outcome=outcome).inc()


__all__ = [
    "ADJUSTMENTS_COUNTER",
    "BASELINES_SET_COUNTER",
    "CORRECTION_LOOKUP_COUNTER",
    "PrometheusMiddleware",
    "REQUEST_COUNTER",
    "REQUEST_ERROR_COUNTER",
    "REQUEST_LATENCY_SECONDS",
    "metrics_endpoint",
    "metrics_router",
    "record_correction_lookup",
]
