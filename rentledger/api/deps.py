"""Common dependencies for API routes."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from rentledger.core.clock import ReferenceClock
from rentledger.core.config import Settings, get_settings
from rentledger.core.errors import NotFoundError, StoreError, ValidationError
from rentledger.db.session import SessionLocal
from rentledger.services.filters import TransactionFilter
from rentledger.services.ipca_client import IpcaClient, MonetaryCorrector


def get_db_session() -> Iterator[Session]:
    """Yield a database session for FastAPI dependencies."""

    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_reference_clock(settings: Settings = Depends(get_settings)) -> ReferenceClock:
    return ReferenceClock.system(settings.timezone)


def get_corrector(settings: Settings = Depends(get_settings)) -> Iterator[MonetaryCorrector]:
    client = IpcaClient(settings.ipca_api_base_url, timeout=settings.ipca_timeout_seconds)
    try:
        yield client
    finally:
        client.close()


@contextmanager
def service_errors() -> Iterator[None]:
    """Translate ledger exceptions raised inside the block into HTTP errors."""
    try:
        yield
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


def split_csv(raw: str | None) -> list[str]:
    return [item.strip() for item in (raw or "").split(",") if item.strip()]


def get_transaction_filter(
    property_ids: str | None = Query(default=None, alias="propertyIds"),
    transaction_types: str | None = Query(default=None, alias="transactionTypes"),
    categories: str | None = Query(default=None),
) -> TransactionFilter:
    """Build a :class:`TransactionFilter` from comma-separated query parameters."""
    with service_errors():
        try:
            ids = [int(item) for item in split_csv(property_ids)]
        except ValueError as exc:
            raise ValidationError(f"Invalid property id list '{property_ids}'", field="propertyIds") from exc
        return TransactionFilter.build(
            property_ids=ids,
            transaction_types=split_csv(transaction_types),
            categories=split_csv(categories),
        )


__all__ = [
    "get_corrector",
    "get_db_session",
    "get_reference_clock",
    "get_transaction_filter",
    "service_errors",
    "split_csv",
]
