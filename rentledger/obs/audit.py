"""Audit logging middleware."""
from __future__ import annotations

import json
import logging
import random
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
from starlette.types import ASGIApp

from rentledger.core.config import Settings

_SENSITIVE_KEYS = {
    "bankreference",
    "bank_reference",
    "account_number",
    "accountnumber",
    "tax_id",
    "cpf",
    "email",
}


def _mask_value(value: Any) -> Any:
    if isinstance(value, dict):
        return _mask_mapping(value)
    if isinstance(value, list):
        return [_mask_value(item) for item in value]
    return value


def _mask_mapping(mapping: dict[str, Any]) -> dict[str, Any]:
    sanitized: dict[str, Any] = {}
    for key, value in mapping.items():
        if str(key).lower() in _SENSITIVE_KEYS:
            if isinstance(value, str) and len(value) > 4:
                sanitized[key] = f"***{value[-4:]}"
            else:
                sanitized[key] = "***"
        else:
            sanitized[key] = _mask_value(value)
    return sanitized


@dataclass(slots=True)
class AuditLogRecord:
    """Structured log entry emitted once per request."""

    timestamp: str
    request_id: str
    method: str
    path: str
    status: int
    duration_ms: float
    ip_address: str | None
    query: dict[str, Any]
    body: Any

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["duration_ms"] = round(self.duration_ms, 2)
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


class AuditMiddleware(BaseHTTPMiddleware):
    """Log a masked audit record for every request and echo ``X-Request-ID``."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        settings: Settings,
        logger: logging.Logger | None = None,
        sampler: Callable[[], float] = random.random,
    ) -> None:
        super().__init__(app)
        self._settings = settings
        self._logger = logger or logging.getLogger("audit")
        self._sampler = sampler

    async def dispatch(self, request: Request, call_next: Callable[[Request], Any]) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        request.state.request_id = request_id
        start = time.perf_counter()

        body_bytes = await request.body()
        self._set_body(request, body_bytes)

        masked_body = None
        if body_bytes:
            try:
                masked_body = _mask_value(json.loads(body_bytes))
            except (json.JSONDecodeError, UnicodeDecodeError):
                masked_body = "<binary>"

        response = await call_next(request)

        if self._should_log():
            record = AuditLogRecord(
                timestamp=datetime.now(timezone.utc).isoformat(),
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=(time.perf_counter() - start) * 1000,
                ip_address=request.client.host if request.client else None,
                query=_mask_mapping(dict(request.query_params.multi_items())),
                body=masked_body,
            )
            self._logger.info(record.to_json())

        response.headers["X-Request-ID"] = request_id
        return response

    def _should_log(self) -> bool:
        rate = self._settings.audit_log_sample_rate
        if rate <= 0:
            return False
        return rate >= 1 or self._sampler() <= rate

    @staticmethod
    def _set_body(request: Request, body: bytes) -> None:
        async def receive() -> dict[str, Any]:
            nonlocal consumed
            if consumed:
                return {"type": "http.request", "body": b"", "more_body": False}
            consumed = True
            return {"type": "http.request", "body": body, "more_body": False}

        consumed = False
        request._receive = receive  # type: ignore[attr-defined]


__all__ = ["AuditLogRecord", "AuditMiddleware"]
