"""HTTP client for the IBGE IPCA monthly-variation series."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

import httpx

from rentledger.core.money import quantize, to_decimal
from rentledger.core.periods import PeriodKey
from rentledger.obs.metrics import record_correction_lookup

logger = logging.getLogger(__name__)

# Aggregate 1737, variable 63: IPCA monthly variation (%), national level.
_SERIES_PATH = "/periodos/{start}-{end}/variaveis/63"
_LOCALITIES = {"localidades": "N1[all]"}


@dataclass(slots=True, frozen=True)
class MonetaryCorrection:
    """Principal corrected by the accumulated IPCA since a reference month."""

    original_value: Decimal
    corrected_value: Decimal
    correction_factor: Decimal
    reference_month: PeriodKey
    month_count: int

    @property
    def correction_percentage(self) -> Decimal:
        return quantize((self.correction_factor - 1) * 100)


class MonetaryCorrector(Protocol):
    """Anything able to correct a principal by inflation. ``None`` means unavailable."""

    def correct(self, principal: Decimal, reference_date: date, *, as_of: date) -> MonetaryCorrection | None:
        ...


def _extract_series(payload: Any) -> dict[str, Any]:
    return payload[0]["resultados"][0]["series"][0]["serie"]


class IpcaClient:
    """Synchronous wrapper around the IBGE aggregates API.

    Any failure (timeout, HTTP error, unexpected payload, empty series) is
    reported as ``None`` so callers can render "correction unavailable".
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = 5.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client()
        self._owns_client = client is None
        self._timeout = timeout

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "IpcaClient":  # pragma: no cover - convenience
        return self

    def __exit__(self, *_args: object) -> None:  # pragma: no cover - convenience
        self.close()

    def monthly_rates(self, start: PeriodKey, end: PeriodKey) -> dict[str, Decimal]:
        """Return ``{YYYYMM: rate_percent}`` for the closed months in ``[start, end]``.

        Raises ``httpx.HTTPError`` on transport failures and ``LookupError``
        or ``ValueError`` on malformed payloads.
        """
        url = self._base_url + _SERIES_PATH.format(start=start.compact, end=end.compact)
        response = self._client.get(url, params=_LOCALITIES, timeout=self._timeout)
        response.raise_for_status()
        series = _extract_series(response.json())
        if not isinstance(series, dict):
            raise ValueError("IPCA series is not an object")

        rates: dict[str, Decimal] = {}
        for period, raw in sorted(series.items()):
            if raw is None:
                continue
            try:
                rates[period] = to_decimal(raw)
            except (ValueError, TypeError, InvalidOperation):
                # IBGE publishes "..." or "-" for months not yet released.
                continue
            if not rates[period].is_finite():
                del rates[period]
        return rates

    def correct(self, principal: Decimal, reference_date: date, *, as_of: date) -> MonetaryCorrection | None:
        start = PeriodKey.from_date(reference_date)
        end = PeriodKey.from_date(as_of).previous()
        if start > end:
            record_correction_lookup("not_applicable")
            return None

        try:
            rates = self.monthly_rates(start, end)
        except httpx.TimeoutException:
            logger.warning("IPCA lookup timed out for %s-%s", start, end)
            record_correction_lookup("timeout")
            return None
        except httpx.HTTPError as exc:
            logger.warning("IPCA lookup failed for %s-%s: %s", start, end, exc)
            record_correction_lookup("http_error")
            return None
        except (LookupError, TypeError, ValueError) as exc:
            logger.warning("Unexpected IPCA payload for %s-%s: %s", start, end, exc)
            record_correction_lookup("malformed")
            return None

        if not rates:
            record_correction_lookup("empty")
            return None

        factor = Decimal(1)
        for rate in rates.values():
            factor *= 1 + rate / 100

        principal = to_decimal(principal)
        correction = MonetaryCorrection(
            original_value=quantize(principal),
            corrected_value=quantize(principal * factor),
            correction_factor=factor,
            reference_month=start,
            month_count=len(rates),
        )
        logger.info(
            "IPCA correction since %s over %d months: %s%%",
            start,
            correction.month_count,
            correction.correction_percentage,
        )
        record_correction_lookup("ok")
        return correction


__all__ = ["IpcaClient", "MonetaryCorrection", "MonetaryCorrector"]
