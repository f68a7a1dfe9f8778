from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from rentledger.core.clock import ReferenceClock
from rentledger.core.errors import ValidationError
from rentledger.models import TransactionType
from rentledger.services.cash_flow import MAX_DAILY_SPAN_DAYS, CashFlowService
from rentledger.services.marco_zero import AccountBalance, MarcoZeroService
from rentledger.services.reconciliation import AdjustmentDraft, ReconciliationService

CLOCK = ReferenceClock(today=date(2025, 3, 15))


def _baseline(session: Session, on: date, total: str) -> None:
    MarcoZeroService(session).set_baseline(on, [AccountBalance(1, "Conta", Decimal(total))])


def _adjust(session: Session, on: date, amount: str) -> None:
    draft = AdjustmentDraft(
        adjustment_date=on,
        amount=Decimal(amount),
        type="balance_adjustment",
        description="Ajuste de conciliação",
    )
    ReconciliationService(session).create(draft, today=CLOCK.today)


def test_transactions_before_the_baseline_are_excluded(db_session: Session, factory) -> None:
    prop = factory.property("Sevilha")
    factory.transaction(prop, "100.00", date(2025, 1, 10))
    factory.transaction(prop, "50.00", date(2025, 2, 10))
    _baseline(db_session, date(2025, 2, 1), "1000.00")

    snapshot = CashFlowService(db_session, clock=CLOCK).balance_as_of(date(2025, 2, 28))

    assert snapshot.balance == Decimal("1050.00")
    assert snapshot.movement_count == 1


def test_adjustments_count_from_their_date(db_session: Session, factory) -> None:
    prop = factory.property("Sevilha")
    factory.transaction(prop, "40.00", date(2025, 2, 5), type=TransactionType.EXPENSE)
    _baseline(db_session, date(2025, 2, 1), "1000.00")
    _adjust(db_session, date(2025, 1, 20), "500.00")
    _adjust(db_session, date(2025, 2, 20), "-15.50")

    service = CashFlowService(db_session, clock=CLOCK)

    assert service.balance_as_of(date(2025, 2, 10)).balance == Decimal("960.00")
    assert service.balance_as_of(date(2025, 2, 20)).balance == Decimal("944.50")


def test_historical_transactions_never_move_the_balance(db_session: Session, factory) -> None:
    prop = factory.property("Sevilha")
    factory.transaction(prop, "999.00", date(2025, 2, 3), is_historical=True)
    _baseline(db_session, date(2025, 2, 1), "1000.00")

    assert CashFlowService(db_session, clock=CLOCK).balance_as_of().balance == Decimal("1000.00")


def test_target_before_baseline_returns_baseline_total(db_session: Session, factory) -> None:
    prop = factory.property("Sevilha")
    factory.transaction(prop, "100.00", date(2025, 1, 10))
    _baseline(db_session, date(2025, 2, 1), "1000.00")

    assert CashFlowService(db_session, clock=CLOCK).balance_as_of(date(2025, 1, 15)).balance == Decimal("1000.00")


def test_without_baseline_account_balances_seed_the_series(db_session: Session, factory) -> None:
    factory.account(initial_balance=Decimal("300.00"))
    factory.account(name="Poupança", initial_balance=Decimal("200.00"))
    prop = factory.property("Sevilha")
    factory.transaction(prop, "100.00", date(2025, 1, 10))

    snapshot = CashFlowService(db_session, clock=CLOCK).balance_as_of(date(2025, 1, 31))

    assert snapshot.balance == Decimal("600.00")
    assert snapshot.marco_zero_id is None


def test_daily_cash_flow_starts_at_the_baseline(db_session: Session, factory) -> None:
    prop = factory.property("Sevilha")
    factory.transaction(prop, "100.00", date(2025, 1, 30))
    factory.transaction(prop, "50.00", date(2025, 2, 2))
    factory.transaction(prop, "20.00", date(2025, 2, 3), type=TransactionType.EXPENSE)
    _baseline(db_session, date(2025, 2, 1), "1000.00")

    report = CashFlowService(db_session, clock=CLOCK).daily_cash_flow(date(2025, 1, 28), date(2025, 2, 4))

    assert report.start == date(2025, 2, 1)
    assert [day.date for day in report.days][0] == date(2025, 2, 1)
    assert len(report.days) == 4
    balances = [day.balance for day in report.days]
    assert balances == [Decimal("1000.00"), Decimal("1050.00"), Decimal("1030.00"), Decimal("1030.00")]
    summary = report.summary
    assert summary.opening_balance == Decimal("1000.00")
    assert summary.closing_balance == Decimal("1030.00")
    assert summary.total_revenue == Decimal("50.00")
    assert summary.total_expenses == Decimal("20.00")
    assert summary.net_cash_flow == Decimal("30.00")
    assert summary.average_daily_flow == Decimal("7.50")
    assert (summary.positive_days, summary.negative_days) == (1, 1)


def test_daily_cash_flow_rejects_inverted_range(db_session: Session) -> None:
    with pytest.raises(ValidationError):
        CashFlowService(db_session, clock=CLOCK).daily_cash_flow(date(2025, 2, 2), date(2025, 2, 1))


def test_daily_cash_flow_caps_the_span(db_session: Session) -> None:
    service = CashFlowService(db_session, clock=CLOCK)

    assert len(service.daily_cash_flow(date(2023, 1, 1), date(2024, 12, 31)).days) == MAX_DAILY_SPAN_DAYS
    with pytest.raises(ValidationError) as excinfo:
        service.daily_cash_flow(date(2023, 1, 1), date(2025, 1, 1))

    assert excinfo.value.field == "endDate"


def test_daily_cash_flow_from_the_first_representable_day(db_session: Session, factory) -> None:
    factory.account(initial_balance=Decimal("250.00"))

    report = CashFlowService(db_session, clock=CLOCK).daily_cash_flow(date.min, date(1, 1, 3))

    assert [day.date for day in report.days] == [date(1, 1, 1), date(1, 1, 2), date(1, 1, 3)]
    assert report.summary.opening_balance == Decimal("250.00")
    assert report.summary.closing_balance == Decimal("250.00")


def _seed_ledger(factory) -> None:  # type: ignore[no-untyped-def]
    prop = factory.property("Sevilha")
    factory.transaction(prop, "1000.00", date(2025, 1, 5))
    factory.transaction(prop, "300.00", date(2025, 1, 20), type=TransactionType.EXPENSE, category="condo")
    factory.transaction(prop, "1000.00", date(2025, 2, 5))
    factory.transaction(prop, "200.00", date(2025, 2, 10), category="fee", is_historical=True)
    factory.transaction(prop, "100.00", date(2025, 2, 15), type=TransactionType.EXPENSE, category="tax")


def test_cash_flow_stats(db_session: Session, factory) -> None:
    _seed_ledger(factory)

    stats = CashFlowService(db_session, clock=CLOCK).cash_flow_stats()

    assert stats.totals.revenue == Decimal("2200.00")
    assert stats.totals.expenses == Decimal("400.00")
    assert stats.totals.net_flow == Decimal("1800.00")
    assert (stats.totals.revenue_count, stats.totals.expense_count) == (3, 2)
    assert stats.expense_to_revenue_ratio == Decimal("18.18")
    assert stats.profit_margin == Decimal("81.82")
    assert [(share.category, share.amount, share.count, share.percentage) for share in stats.categories] == [
        ("rent", Decimal("2000.00"), 2, Decimal("90.91")),
        ("condo", Decimal("300.00"), 1, Decimal("75.00")),
        ("fee", Decimal("200.00"), 1, Decimal("9.09")),
        ("tax", Decimal("100.00"), 1, Decimal("25.00")),
    ]
    assert [(trend.month, trend.net_flow, trend.margin) for trend in stats.monthly_trends] == [
        ("01/2025", Decimal("700.00"), Decimal("70.00")),
        ("02/2025", Decimal("1100.00"), Decimal("91.67")),
    ]
    assert stats.average_monthly_revenue == Decimal("1100.00")
    assert stats.average_monthly_expenses == Decimal("200.00")
    assert stats.average_monthly_net_flow == Decimal("900.00")


def test_cash_flow_stats_within_a_range(db_session: Session, factory) -> None:
    _seed_ledger(factory)

    stats = CashFlowService(db_session, clock=CLOCK).cash_flow_stats(date(2025, 2, 1), date(2025, 2, 28))

    assert stats.totals.revenue == Decimal("1200.00")
    assert stats.totals.expense_count == 1
    assert [trend.month for trend in stats.monthly_trends] == ["02/2025"]


def test_cash_flow_stats_without_revenue(db_session: Session) -> None:
    stats = CashFlowService(db_session, clock=CLOCK).cash_flow_stats()

    assert stats.totals.revenue == Decimal("0.00")
    assert stats.expense_to_revenue_ratio is None
    assert stats.profit_margin is None
    assert stats.categories == []
    assert stats.average_monthly_net_flow == Decimal("0.00")


def test_cash_flow_stats_rejects_inverted_range(db_session: Session) -> None:
    with pytest.raises(ValidationError) as excinfo:
        CashFlowService(db_session, clock=CLOCK).cash_flow_stats(date(2025, 2, 2), date(2025, 2, 1))

    assert excinfo.value.field == "startDate"


def test_projection_averages_the_last_six_closed_months(db_session: Session, factory) -> None:
    prop = factory.property("Sevilha")
    factory.transaction(prop, "700.00", date(2024, 8, 31))
    factory.transaction(prop, "1200.00", date(2024, 10, 5))
    factory.transaction(prop, "300.00", date(2024, 12, 10), type=TransactionType.EXPENSE, category="tax")
    factory.transaction(prop, "1800.00", date(2025, 2, 5))
    factory.transaction(prop, "100.00", date(2025, 3, 2))

    projection = CashFlowService(db_session, clock=CLOCK).project(3)

    assert (projection.history_start, projection.history_end) == (date(2024, 9, 1), date(2025, 2, 28))
    assert projection.current_balance == Decimal("3500.00")
    assert [(item.category, item.projected_amount) for item in projection.projections[0].categories] == [
        ("tax", Decimal("50.00")),
        ("rent", Decimal("500.00")),
    ]
    assert [(item.month, item.net_flow, item.balance) for item in projection.projections] == [
        ("04/2025", Decimal("450.00"), Decimal("3950.00")),
        ("05/2025", Decimal("450.00"), Decimal("4400.00")),
        ("06/2025", Decimal("450.00"), Decimal("4850.00")),
    ]
    assert projection.total_revenue == Decimal("1500.00")
    assert projection.total_expenses == Decimal("150.00")
    assert projection.total_net_flow == Decimal("1350.00")
    assert projection.final_balance == Decimal("4850.00")


@pytest.mark.parametrize("months", [0, 25])
def test_projection_rejects_out_of_range_months(db_session: Session, months: int) -> None:
    with pytest.raises(ValidationError) as excinfo:
        CashFlowService(db_session, clock=CLOCK).project(months)

    assert excinfo.value.field == "months"
