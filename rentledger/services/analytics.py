"""Store-backed analytics: pivots, IPCA margins and single-month views."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from rentledger.core.clock import ReferenceClock
from rentledger.core.errors import ValidationError
from rentledger.core.money import ZERO, RunningTotal, money_sum, percentage
from rentledger.core.periods import PeriodKey, parse_periods
from rentledger.models import Property, TransactionType
from rentledger.services.aggregation import (
    AcquisitionCost,
    PivotEngine,
    PivotTable,
    SingleMonthView,
    SortState,
    name_sort_key,
    split_single_month,
    weighted_margin,
)
from rentledger.obs.tracing import ledger_span
from rentledger.services.filters import TransactionFilter
from rentledger.services.ipca_client import MonetaryCorrector
from rentledger.services.store import (
    TransactionRecord,
    available_months,
    fetch_properties,
    fetch_transactions,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PropertyMargin:
    property_id: int
    property_name: str
    revenue: Decimal
    expenses: Decimal
    net_result: Decimal
    original_acquisition_cost: Decimal
    ipca_corrected_acquisition_cost: Decimal | None
    profit_margin_original: Decimal | None
    profit_margin_ipca: Decimal | None
    ipca_correction: Decimal | None


@dataclass(slots=True)
class MarginReport:
    months: list[str]
    rows: list[PropertyMargin] = field(default_factory=list)
    total_net_result: Decimal = ZERO
    total_corrected_cost: Decimal = ZERO
    weighted_margin: Decimal | None = None


class CorrectionCache:
    """Per-request memo of acquisition costs keyed by (purchase date, principal)."""

    def __init__(self, corrector: MonetaryCorrector | None, *, as_of: date) -> None:
        self._corrector = corrector
        self._as_of = as_of
        self._memo: dict[tuple[date, Decimal], Decimal | None] = {}

    def cost_of(self, prop: Property) -> AcquisitionCost:
        original = prop.acquisition_cost
        if not original or prop.purchase_date is None or self._corrector is None:
            return AcquisitionCost(original=original)
        key = (prop.purchase_date, original)
        if key not in self._memo:
            correction = self._corrector.correct(original, prop.purchase_date, as_of=self._as_of)
            self._memo[key] = correction.corrected_value if correction is not None else None
        return AcquisitionCost(original=original, corrected=self._memo[key])


class AnalyticsService:
    """Runs the pivot engine over stored transactions."""

    def __init__(
        self,
        session: Session,
        *,
        clock: ReferenceClock,
        corrector: MonetaryCorrector | None = None,
        engine: PivotEngine | None = None,
    ) -> None:
        self._session = session
        self._clock = clock
        self._corrector = corrector
        self._engine = engine or PivotEngine()

    def _costs(self, property_ids: Iterable[int]):
        cache = CorrectionCache(self._corrector, as_of=self._clock.today)
        properties = fetch_properties(self._session, set(property_ids))

        def cost_for(property_id: int) -> AcquisitionCost | None:
            prop = properties.get(property_id)
            return cache.cost_of(prop) if prop is not None else None

        return cost_for

    def _load(self, periods: Sequence[PeriodKey], filters: TransactionFilter) -> list[TransactionRecord]:
        records = fetch_transactions(self._session, periods, filters)
        logger.debug("Loaded %d transactions for %d periods", len(records), len(periods))
        return records

    def transactions_by_periods(self, months: Iterable[str], filters: TransactionFilter) -> list[TransactionRecord]:
        return self._load(parse_periods(months), filters)

    def pivot(self, months: Iterable[str], filters: TransactionFilter, sort: SortState | None = None) -> PivotTable:
        periods = parse_periods(months)
        with ledger_span("analytics.pivot", periods=len(periods)):
            records = self._load(periods, filters)
            cost_for = None
            if periods == [self._clock.current_month]:
                cost_for = self._costs(record.property_id for record in records)
            return self._engine.build(
                records, periods, clock=self._clock, filters=filters, sort=sort, cost_for=cost_for
            )

    def single_month_detailed(self, month: str, filters: TransactionFilter) -> SingleMonthView:
        if not month or not month.strip():
            raise ValidationError("Month parameter is required", field="month")
        period = PeriodKey.parse(month)
        records = self._load([period], filters)
        cost_for = self._costs(record.property_id for record in records)
        return split_single_month(records, period, filters=filters, cost_for=cost_for)

    def pivot_with_ipca(self, months: Iterable[str], filters: TransactionFilter) -> MarginReport:
        periods = parse_periods(months)
        report = MarginReport(months=[str(period) for period in periods])
        records = self._load(periods, filters)
        if not records:
            return report

        names: dict[int, str] = {}
        revenue: dict[int, RunningTotal] = {}
        expenses: dict[int, RunningTotal] = {}
        for record in records:
            if record.property_id not in names:
                names[record.property_id] = record.property_name
                revenue[record.property_id] = RunningTotal()
                expenses[record.property_id] = RunningTotal()
            bucket = revenue if record.type is TransactionType.REVENUE else expenses
            bucket[record.property_id].add(record.amount)

        cost_for = self._costs(names)
        for property_id, name in names.items():
            cost = cost_for(property_id) or AcquisitionCost(original=ZERO)
            net = money_sum((revenue[property_id].value, -expenses[property_id].value))
            report.rows.append(
                PropertyMargin(
                    property_id=property_id,
                    property_name=name,
                    revenue=revenue[property_id].value,
                    expenses=expenses[property_id].value,
                    net_result=net,
                    original_acquisition_cost=cost.original,
                    ipca_corrected_acquisition_cost=cost.corrected,
                    profit_margin_original=percentage(net, cost.original),
                    profit_margin_ipca=percentage(net, cost.corrected) if cost.corrected else None,
                    ipca_correction=cost.correction_percentage,
                )
            )
        report.rows.sort(key=lambda row: (name_sort_key(row.property_name), row.property_name, row.property_id))
        report.total_net_result = money_sum(row.net_result for row in report.rows)
        report.total_corrected_cost = money_sum(
            row.ipca_corrected_acquisition_cost for row in report.rows if row.ipca_corrected_acquisition_cost
        )
        report.weighted_margin = weighted_margin(
            (row.net_result, row.ipca_corrected_acquisition_cost) for row in report.rows
        )
        return report

    def available_months(self) -> list[str]:
        return [str(period) for period in available_months(self._session)]


__all__ = ["AnalyticsService", "CorrectionCache", "MarginReport", "PropertyMargin"]
