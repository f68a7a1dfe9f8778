"""Configuration management for the rental ledger service."""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = Field(default="Rental Ledger")
    version: str = Field(default="0.1.0")
    docs_url: str | None = Field(default="/docs")
    redoc_url: str | None = Field(default="/redoc")
    openapi_url: str = Field(default="/openapi.json")

    database_url: str = Field(default="sqlite:///./rentledger.db")
    timezone: str = Field(default="America/Sao_Paulo", description="Timezone used to resolve the current month")

    ipca_api_base_url: str = Field(
        default="https://servicodados.ibge.gov.br/api/v3/agregados/1737",
        description="IBGE aggregate exposing the monthly IPCA variation",
    )
    ipca_timeout_seconds: float = Field(default=5.0)

    enable_metrics: bool = Field(default=True)
    enable_tracing: bool = Field(default=False)
    otel_exporter_endpoint: str | None = Field(default=None)
    audit_log_sample_rate: float = Field(default=1.0)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


__all__ = ["Settings", "get_settings"]
