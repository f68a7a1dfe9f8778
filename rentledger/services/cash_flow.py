"""Cash-flow views anchored on the active baseline.

With an active baseline the balance at ``marco_date`` is the baseline
``total_balance``; only non-historical transactions and reconciliation
adjustments dated on or after ``marco_date`` move it. Without a baseline the
sum of the accounts' initial balances seeds the series and every
non-historical movement counts.

Statistics and projections describe the recorded transactions themselves and
therefore include historical rows.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from sqlalchemy.orm import Session

from rentledger.core.clock import ReferenceClock
from rentledger.core.errors import ValidationError
from rentledger.core.money import ZERO, RunningTotal, divide, money_sum, percentage, running_totals
from rentledger.core.periods import PeriodKey
from rentledger.models import MarcoZero, TransactionType
from rentledger.services.marco_zero import MarcoZeroService
from rentledger.services.store import (
    CashMovement,
    LedgerEntry,
    account_initial_balances,
    fetch_cash_movements,
    fetch_ledger_entries,
)

MAX_DAILY_SPAN_DAYS = 731
MAX_PROJECTION_MONTHS = 24
PROJECTION_HISTORY_MONTHS = 6


@dataclass(slots=True, frozen=True)
class BalanceSnapshot:
    target_date: date
    balance: Decimal
    marco_zero_id: int | None
    marco_date: date | None
    movement_count: int


@dataclass(slots=True)
class DailyCashFlow:
    date: date
    revenue: Decimal = ZERO
    expenses: Decimal = ZERO
    adjustments: Decimal = ZERO
    net_flow: Decimal = ZERO
    balance: Decimal = ZERO


@dataclass(slots=True)
class CashFlowSummary:
    opening_balance: Decimal
    closing_balance: Decimal
    total_revenue: Decimal = ZERO
    total_expenses: Decimal = ZERO
    total_adjustments: Decimal = ZERO
    net_cash_flow: Decimal = ZERO
    average_daily_flow: Decimal = ZERO
    positive_days: int = 0
    negative_days: int = 0


@dataclass(slots=True)
class CashFlowReport:
    start: date
    end: date
    days: list[DailyCashFlow] = field(default_factory=list)
    summary: CashFlowSummary | None = None
    marco_zero_id: int | None = None


@dataclass(slots=True, frozen=True)
class TypeTotals:
    revenue: Decimal
    expenses: Decimal
    net_flow: Decimal
    revenue_count: int
    expense_count: int


@dataclass(slots=True, frozen=True)
class CategoryShare:
    """A category's total and its share of the revenue or expense total."""

    type: TransactionType
    category: str
    amount: Decimal
    count: int
    percentage: Decimal | None


@dataclass(slots=True, frozen=True)
class MonthlyTrend:
    month: str
    revenue: Decimal
    expenses: Decimal
    net_flow: Decimal
    margin: Decimal | None


@dataclass(slots=True, frozen=True)
class CashFlowStats:
    start: date | None
    end: date | None
    totals: TypeTotals
    expense_to_revenue_ratio: Decimal | None
    profit_margin: Decimal | None
    categories: list[CategoryShare]
    monthly_trends: list[MonthlyTrend]
    average_monthly_revenue: Decimal
    average_monthly_expenses: Decimal
    average_monthly_net_flow: Decimal


@dataclass(slots=True, frozen=True)
class ProjectedCategory:
    type: TransactionType
    category: str
    projected_amount: Decimal


@dataclass(slots=True, frozen=True)
class ProjectedMonth:
    month: str
    revenue: Decimal
    expenses: Decimal
    net_flow: Decimal
    balance: Decimal
    categories: list[ProjectedCategory]


@dataclass(slots=True, frozen=True)
class CashFlowProjection:
    current_balance: Decimal
    months: int
    history_start: date
    history_end: date
    projections: list[ProjectedMonth]
    total_revenue: Decimal
    total_expenses: Decimal
    total_net_flow: Decimal
    final_balance: Decimal


def summarize_entries(
    entries: Iterable[LedgerEntry],
    *,
    start: date | None = None,
    end: date | None = None,
) -> CashFlowStats:
    """Totals, category shares and monthly trends of ``entries``."""
    by_type: dict[TransactionType, RunningTotal] = defaultdict(RunningTotal)
    counts: dict[TransactionType, int] = defaultdict(int)
    by_category: dict[tuple[TransactionType, str], RunningTotal] = defaultdict(RunningTotal)
    category_counts: dict[tuple[TransactionType, str], int] = defaultdict(int)
    by_month: dict[PeriodKey, dict[TransactionType, RunningTotal]] = {}

    for entry in entries:
        by_type[entry.type].add(entry.amount)
        counts[entry.type] += 1
        by_category[(entry.type, entry.category)].add(entry.amount)
        category_counts[(entry.type, entry.category)] += 1
        month = by_month.setdefault(
            PeriodKey.from_date(entry.date),
            {TransactionType.REVENUE: RunningTotal(), TransactionType.EXPENSE: RunningTotal()},
        )
        month[entry.type].add(entry.amount)

    revenue = by_type[TransactionType.REVENUE].value
    expenses = by_type[TransactionType.EXPENSE].value
    net_flow = money_sum((revenue, -expenses))
    type_totals = {TransactionType.REVENUE: revenue, TransactionType.EXPENSE: expenses}

    categories = [
        CategoryShare(
            type=kind,
            category=category,
            amount=total.value,
            count=category_counts[(kind, category)],
            percentage=percentage(total.value, type_totals[kind]),
        )
        for (kind, category), total in by_category.items()
    ]
    categories.sort(key=lambda share: (-share.amount, share.type.value, share.category))

    trends = []
    for period in sorted(by_month):
        month_revenue = by_month[period][TransactionType.REVENUE].value
        month_expenses = by_month[period][TransactionType.EXPENSE].value
        month_net = money_sum((month_revenue, -month_expenses))
        trends.append(
            MonthlyTrend(
                month=str(period),
                revenue=month_revenue,
                expenses=month_expenses,
                net_flow=month_net,
                margin=percentage(month_net, month_revenue),
            )
        )

    average_revenue = average_expenses = ZERO
    if trends:
        average_revenue = divide(money_sum(trend.revenue for trend in trends), len(trends))
        average_expenses = divide(money_sum(trend.expenses for trend in trends), len(trends))

    return CashFlowStats(
        start=start,
        end=end,
        totals=TypeTotals(
            revenue=revenue,
            expenses=expenses,
            net_flow=net_flow,
            revenue_count=counts[TransactionType.REVENUE],
            expense_count=counts[TransactionType.EXPENSE],
        ),
        expense_to_revenue_ratio=percentage(expenses, revenue),
        profit_margin=percentage(net_flow, revenue),
        categories=categories,
        monthly_trends=trends,
        average_monthly_revenue=average_revenue,
        average_monthly_expenses=average_expenses,
        average_monthly_net_flow=money_sum((average_revenue, -average_expenses)),
    )


class CashFlowService:
    def __init__(self, session: Session, *, clock: ReferenceClock) -> None:
        self._session = session
        self._clock = clock

    def _seed(self, baseline: MarcoZero | None) -> Decimal:
        if baseline is not None:
            return baseline.total_balance
        return money_sum(account_initial_balances(self._session))

    def balance_as_of(self, target: date | None = None, *, baseline: MarcoZero | None = None) -> BalanceSnapshot:
        """Balance at the end of ``target`` (defaults to today)."""
        target = target or self._clock.today
        baseline = baseline if baseline is not None else MarcoZeroService(self._session).get_active()
        start = baseline.marco_date if baseline is not None else None

        movements: list[CashMovement] = []
        if start is None or target >= start:
            movements = fetch_cash_movements(self._session, start=start, end=target)

        total = RunningTotal(self._seed(baseline))
        for movement in movements:
            total.add(movement.amount)
        return BalanceSnapshot(
            target_date=target,
            balance=total.value,
            marco_zero_id=baseline.id if baseline is not None else None,
            marco_date=start,
            movement_count=len(movements),
        )

    def daily_cash_flow(self, start: date, end: date) -> CashFlowReport:
        """One entry per day in ``[start, end]`` with the running balance."""
        if start > end:
            raise ValidationError("Start date must not be after end date", field="startDate")
        if (end - start).days >= MAX_DAILY_SPAN_DAYS:
            raise ValidationError(f"Daily cash flow covers at most {MAX_DAILY_SPAN_DAYS} days", field="endDate")

        baseline = MarcoZeroService(self._session).get_active()
        first_day = start
        if baseline is not None and baseline.marco_date > start:
            first_day = baseline.marco_date
        report = CashFlowReport(start=first_day, end=end, marco_zero_id=baseline.id if baseline else None)

        if first_day == date.min or (baseline is not None and first_day == baseline.marco_date):
            opening = self._seed(baseline)
        else:
            opening = self.balance_as_of(first_day - timedelta(days=1), baseline=baseline).balance
        if first_day > end:
            report.summary = CashFlowSummary(opening_balance=opening, closing_balance=opening)
            return report

        by_day = {
            first_day + timedelta(days=offset): DailyCashFlow(date=first_day + timedelta(days=offset))
            for offset in range((end - first_day).days + 1)
        }

        revenue, expenses, adjustments = RunningTotal(), RunningTotal(), RunningTotal()
        for movement in fetch_cash_movements(self._session, start=first_day, end=end):
            entry = by_day[movement.date]
            if movement.kind == "revenue":
                entry.revenue = money_sum((entry.revenue, movement.amount))
                revenue.add(movement.amount)
            elif movement.kind == "expense":
                entry.expenses = money_sum((entry.expenses, -movement.amount))
                expenses.add(-movement.amount)
            else:
                entry.adjustments = money_sum((entry.adjustments, movement.amount))
                adjustments.add(movement.amount)

        report.days = list(by_day.values())
        summary = CashFlowSummary(opening_balance=opening, closing_balance=opening)
        for entry in report.days:
            entry.net_flow = money_sum((entry.revenue, -entry.expenses, entry.adjustments))
            if entry.net_flow > 0:
                summary.positive_days += 1
            elif entry.net_flow < 0:
                summary.negative_days += 1
        balances = running_totals((entry.net_flow for entry in report.days), start=opening)
        for entry, balance in zip(report.days, balances):
            entry.balance = balance

        summary.closing_balance = balances[-1]
        summary.total_revenue = revenue.value
        summary.total_expenses = expenses.value
        summary.total_adjustments = adjustments.value
        summary.net_cash_flow = money_sum((revenue.value, -expenses.value, adjustments.value))
        summary.average_daily_flow = divide(summary.net_cash_flow, len(report.days))
        report.summary = summary
        return report

    def cash_flow_stats(self, start: date | None = None, end: date | None = None) -> CashFlowStats:
        """Revenue/expense totals, category shares and monthly trends for ``[start, end]``."""
        if start is not None and end is not None and start > end:
            raise ValidationError("Start date must not be after end date", field="startDate")
        return summarize_entries(fetch_ledger_entries(self._session, start=start, end=end), start=start, end=end)

    def project(self, months: int = 3) -> CashFlowProjection:
        """Project ``months`` ahead from the monthly average of the last closed months.

        Each category contributes its total over the history window divided by
        the window length; the projected balance starts at today's balance.
        """
        if not 1 <= months <= MAX_PROJECTION_MONTHS:
            raise ValidationError(f"Projection covers 1 to {MAX_PROJECTION_MONTHS} months", field="months")

        current = self._clock.current_month
        last_closed = current.previous()
        first = last_closed
        for _ in range(PROJECTION_HISTORY_MONTHS - 1):
            first = first.previous()
        history_start, history_end = first.first_day(), last_closed.last_day()

        totals: dict[tuple[TransactionType, str], RunningTotal] = defaultdict(RunningTotal)
        for entry in fetch_ledger_entries(self._session, start=history_start, end=history_end):
            totals[(entry.type, entry.category)].add(entry.amount)
        categories = sorted(
            (
                ProjectedCategory(
                    type=kind,
                    category=category,
                    projected_amount=divide(total.value, PROJECTION_HISTORY_MONTHS),
                )
                for (kind, category), total in totals.items()
            ),
            key=lambda item: (item.type.value, item.category),
        )
        monthly_revenue = money_sum(c.projected_amount for c in categories if c.type is TransactionType.REVENUE)
        monthly_expenses = money_sum(c.projected_amount for c in categories if c.type is TransactionType.EXPENSE)
        monthly_net = money_sum((monthly_revenue, -monthly_expenses))

        current_balance = self.balance_as_of(self._clock.today).balance
        balance = RunningTotal(current_balance)
        projections = []
        period = current
        for _ in range(months):
            period = period.following()
            projections.append(
                ProjectedMonth(
                    month=str(period),
                    revenue=monthly_revenue,
                    expenses=monthly_expenses,
                    net_flow=monthly_net,
                    balance=balance.add(monthly_net),
                    categories=categories,
                )
            )

        total_revenue = money_sum(item.revenue for item in projections)
        total_expenses = money_sum(item.expenses for item in projections)
        return CashFlowProjection(
            current_balance=current_balance,
            months=months,
            history_start=history_start,
            history_end=history_end,
            projections=projections,
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            total_net_flow=money_sum((total_revenue, -total_expenses)),
            final_balance=balance.value,
        )


__all__ = [
    "BalanceSnapshot",
    "CashFlowProjection",
    "CashFlowReport",
    "CashFlowService",
    "CashFlowStats",
    "CashFlowSummary",
    "CategoryShare",
    "DailyCashFlow",
    "MAX_DAILY_SPAN_DAYS",
    "MAX_PROJECTION_MONTHS",
    "MonthlyTrend",
    "ProjectedCategory",
    "ProjectedMonth",
    "TypeTotals",
    "summarize_entries",
]
