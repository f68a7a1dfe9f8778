"""Domain exceptions shared by the ledger services."""
from __future__ import annotations


class LedgerError(RuntimeError):
    """Base exception for ledger service errors."""


class ValidationError(LedgerError):
    """Raised when input fails a business rule before any mutation happens."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(LedgerError):
    """Raised when an identifier does not resolve to a stored record."""


class StoreError(LedgerError):
    """Raised when the backing store fails to persist or load data."""


__all__ = ["LedgerError", "NotFoundError", "StoreError", "ValidationError"]
