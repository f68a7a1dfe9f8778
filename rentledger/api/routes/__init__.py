"""Top level API router registration."""
from fastapi import APIRouter, FastAPI

from rentledger.api.routes import analytics, cash_flow, health, marco_zero, reconciliation


def register_routes(application: FastAPI) -> None:
    """Register all API routers with the FastAPI application."""
    api_router = APIRouter(prefix="/api")

    api_router.include_router(health.router, tags=["health"])
    api_router.include_router(marco_zero.router, tags=["marco-zero"])
    api_router.include_router(reconciliation.router, tags=["reconciliation"])
    api_router.include_router(analytics.router, tags=["analytics"])
    api_router.include_router(cash_flow.router, tags=["cash-flow"])
    api_router.include_router(cash_flow.ipca_router, tags=["ipca"])

    application.include_router(api_router)


__all__ = ["register_routes"]
