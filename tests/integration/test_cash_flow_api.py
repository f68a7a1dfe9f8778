from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi.testclient import TestClient

from rentledger.models import TransactionType


def _declare_baseline(client: TestClient, marco_date: str, balance: str) -> dict[str, object]:
    response = client.post(
        "/api/marco-zero",
        json={"marcoDate": marco_date, "accountBalances": [{"accountId": 1, "balance": balance}]},
    )
    assert response.status_code == 201
    return response.json()


def test_balance_counts_only_movements_after_the_baseline(client: TestClient, factory) -> None:  # type: ignore[no-untyped-def]
    prop = factory.property("Sevilha")
    factory.transaction(prop, "100.00", date(2025, 1, 10))
    factory.transaction(prop, "50.00", date(2025, 2, 10))
    baseline = _declare_baseline(client, "2025-02-01", "1000.00")

    response = client.get("/api/cash-flow/balance", params={"date": "2025-02-28"})

    assert response.status_code == 200
    body = response.json()
    assert body["balance"] == "1050.00"
    assert body["marcoZeroId"] == baseline["id"]
    assert body["marcoDate"] == "2025-02-01"
    assert body["movementCount"] == 1


def test_daily_cash_flow(client: TestClient, factory) -> None:  # type: ignore[no-untyped-def]
    prop = factory.property("Sevilha")
    factory.transaction(prop, "50.00", date(2025, 2, 2))
    factory.transaction(prop, "20.00", date(2025, 2, 3), type=TransactionType.EXPENSE)
    _declare_baseline(client, "2025-02-01", "1000.00")

    response = client.get("/api/cash-flow/daily", params={"startDate": "2025-02-01", "endDate": "2025-02-04"})

    assert response.status_code == 200
    body = response.json()
    assert [day["balance"] for day in body["days"]] == ["1000.00", "1050.00", "1030.00", "1030.00"]
    assert body["days"][2]["expenses"] == "20.00"
    assert body["summary"]["netCashFlow"] == "30.00"


def test_daily_cash_flow_rejects_inverted_range(client: TestClient) -> None:
    response = client.get("/api/cash-flow/daily", params={"startDate": "2025-02-04", "endDate": "2025-02-01"})

    assert response.status_code == 400


def test_ipca_calculate(client: TestClient, corrector) -> None:  # type: ignore[no-untyped-def]
    response = client.get("/api/ipca/calculate", params={"value": "1000", "purchaseDate": "2024-01-15"})

    assert response.status_code == 200
    body = response.json()
    assert body["available"] is True
    assert body["correctedValue"] == "1100.00"
    assert body["correctionPercentage"] == "10.00"
    assert body["referenceMonth"] == "01/2024"
    assert corrector.calls[0][2] == date(2025, 3, 15)


def test_ipca_calculate_when_unavailable(client: TestClient, corrector) -> None:  # type: ignore[no-untyped-def]
    corrector.available = False

    body = client.get("/api/ipca/calculate", params={"value": "1000", "purchaseDate": "2024-01-15"}).json()

    assert body["available"] is False
    assert body["originalValue"] == "1000.00"
    assert body["correctedValue"] is None


def test_daily_cash_flow_rejects_spans_over_two_years(client: TestClient) -> None:
    response = client.get("/api/cash-flow/daily", params={"startDate": "0001-01-01", "endDate": "2025-01-01"})

    assert response.status_code == 400


def test_daily_cash_flow_from_the_first_representable_day(client: TestClient) -> None:
    response = client.get("/api/cash-flow/daily", params={"startDate": "0001-01-01", "endDate": "0001-01-03"})

    assert response.status_code == 200
    assert len(response.json()["days"]) == 3


def test_cash_flow_stats(client: TestClient, factory) -> None:  # type: ignore[no-untyped-def]
    prop = factory.property("Sevilha")
    factory.transaction(prop, "1000.00", date(2025, 1, 5))
    factory.transaction(prop, "250.00", date(2025, 1, 20), type=TransactionType.EXPENSE, category="condo")

    response = client.get("/api/cash-flow/stats", params={"startDate": "2025-01-01", "endDate": "2025-01-31"})

    assert response.status_code == 200
    body = response.json()
    assert body["totals"]["netFlow"] == "750.00"
    assert body["expenseToRevenueRatio"] == "25.00"
    assert body["categories"][0] == {
        "type": "revenue",
        "category": "rent",
        "amount": "1000.00",
        "count": 1,
        "percentage": "100.00",
    }
    assert body["monthlyTrends"] == [
        {"month": "01/2025", "revenue": "1000.00", "expenses": "250.00", "netFlow": "750.00", "margin": "75.00"}
    ]


def test_cash_flow_stats_rejects_inverted_range(client: TestClient) -> None:
    response = client.get("/api/cash-flow/stats", params={"startDate": "2025-02-04", "endDate": "2025-02-01"})

    assert response.status_code == 400


def test_cash_flow_projection(client: TestClient, factory) -> None:  # type: ignore[no-untyped-def]
    prop = factory.property("Sevilha")
    factory.transaction(prop, "600.00", date(2025, 2, 5))

    response = client.get("/api/cash-flow/projection", params={"months": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["currentBalance"] == "600.00"
    assert [(item["month"], item["balance"]) for item in body["projections"]] == [
        ("04/2025", "700.00"),
        ("05/2025", "800.00"),
    ]
    assert body["finalBalance"] == "800.00"


def test_cash_flow_projection_rejects_out_of_range_months(client: TestClient) -> None:
    assert client.get("/api/cash-flow/projection", params={"months": 25}).status_code == 400


def test_ipca_calculate_accepts_initial_value(client: TestClient, corrector) -> None:  # type: ignore[no-untyped-def]
    response = client.get("/api/ipca/calculate", params={"initialValue": "500", "purchaseDate": "2024-01-15"})

    assert response.status_code == 200
    assert response.json()["correctedValue"] == "550.00"
    assert corrector.calls[0][0] == Decimal("500")


def test_ipca_calculate_requires_a_value(client: TestClient) -> None:
    response = client.get("/api/ipca/calculate", params={"purchaseDate": "2024-01-15"})

    assert response.status_code == 400
