from __future__ import annotations

from datetime import date
from decimal import Decimal

import httpx

from rentledger.core.periods import PeriodKey
from rentledger.services.ipca_client import IpcaClient

BASE_URL = "https://ibge.test/api/v3/agregados/1737"
AS_OF = date(2025, 4, 10)


def _payload(series: dict[str, object]) -> list[dict[str, object]]:
    return [{"id": "63", "resultados": [{"series": [{"localidade": {"id": "1"}, "serie": series}]}]}]


def _client(handler) -> IpcaClient:  # type: ignore[no-untyped-def]
    return IpcaClient(BASE_URL, client=httpx.Client(transport=httpx.MockTransport(handler)), timeout=1.0)


def test_correct_compounds_monthly_rates() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_payload({"202501": "1.00", "202502": "2.00", "202503": "..."}))

    result = _client(handler).correct(Decimal("1000.00"), date(2025, 1, 20), as_of=AS_OF)

    assert result is not None
    assert result.correction_factor == Decimal("1.0302")
    assert result.corrected_value == Decimal("1030.20")
    assert result.correction_percentage == Decimal("3.02")
    assert result.month_count == 2
    assert result.reference_month == PeriodKey(2025, 1)
    assert seen[0].url.path.endswith("/periodos/202501-202503/variaveis/63")
    assert seen[0].url.params["localidades"] == "N1[all]"


def test_reference_in_current_month_is_not_correctable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be called
        raise AssertionError("no request expected")

    assert _client(handler).correct(Decimal("1000"), date(2025, 4, 2), as_of=AS_OF) is None


def test_http_errors_mean_correction_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "erro"})

    assert _client(handler).correct(Decimal("1000"), date(2024, 1, 1), as_of=AS_OF) is None


def test_timeouts_mean_correction_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    assert _client(handler).correct(Decimal("1000"), date(2024, 1, 1), as_of=AS_OF) is None


def test_malformed_or_empty_payloads_mean_correction_unavailable() -> None:
    def malformed(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"resultados": []}])

    def empty(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_payload({"202401": None, "202402": "-"}))

    assert _client(malformed).correct(Decimal("1000"), date(2024, 1, 1), as_of=AS_OF) is None
    assert _client(empty).correct(Decimal("1000"), date(2024, 1, 1), as_of=AS_OF) is None
