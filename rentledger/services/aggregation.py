"""Period aggregation engine.

Turns a list of :class:`~rentledger.services.store.TransactionRecord` into a
property-by-month pivot table. Signed amounts (revenue positive, expense
negative) are accumulated per cell and per column with :class:`RunningTotal`,
so every partial sum is rounded to cents as it is built.

When the only requested month is the current one the table also carries a
per-property split between settled and pending amounts, together with the
profit margin over the IPCA-corrected acquisition cost.
"""
from __future__ import annotations

import enum
import unicodedata
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from rentledger.core.clock import ReferenceClock
from rentledger.core.errors import ValidationError
from rentledger.core.money import ZERO, RunningTotal, divide, money_sum, percentage
from rentledger.core.periods import PeriodKey, sort_periods
from rentledger.services.filters import TransactionFilter
from rentledger.services.store import TransactionRecord

SORT_BY_NAME = "propertyName"
SORT_BY_TOTAL = "total"
SORT_BY_AVERAGE = "monthlyAverage"


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"

    def flipped(self) -> "SortDirection":
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC


def name_sort_key(name: str) -> str:
    """Accent- and case-insensitive collation key (``"Ápto"`` sorts with ``"apto"``)."""
    decomposed = unicodedata.normalize("NFKD", name)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


@dataclass(frozen=True, slots=True)
class SortState:
    """Sort column and direction of a pivot table."""

    key: str = SORT_BY_NAME
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def parse(cls, key: str | None, direction: str | None = None) -> "SortState":
        key = (key or SORT_BY_NAME).strip()
        if key not in (SORT_BY_NAME, SORT_BY_TOTAL, SORT_BY_AVERAGE):
            # Any other key must name a month column.
            try:
                key = str(PeriodKey.parse(key))
            except ValidationError as exc:
                raise ValidationError(f"Unknown sort key '{key}'", field="sortKey") from exc
        try:
            resolved = SortDirection((direction or SortDirection.ASC.value).lower())
        except ValueError as exc:
            raise ValidationError(f"Unknown sort direction '{direction}'", field="sortDirection") from exc
        return cls(key=key, direction=resolved)

    def toggle(self, key: str) -> "SortState":
        """Clicking the active column flips the direction; a new column starts ascending."""
        if key == self.key:
            return SortState(key=self.key, direction=self.direction.flipped())
        return SortState(key=key, direction=SortDirection.ASC)


@dataclass(frozen=True, slots=True)
class AcquisitionCost:
    """Original and IPCA-corrected acquisition cost of a property."""

    original: Decimal
    corrected: Decimal | None = None

    @property
    def correction_percentage(self) -> Decimal | None:
        if self.corrected is None or not self.original:
            return None
        return percentage(self.corrected - self.original, self.original)


CostLookup = Callable[[int], AcquisitionCost | None]


@dataclass(slots=True)
class PivotRow:
    property_id: int
    property_name: str
    monthly_data: dict[str, Decimal]
    total: Decimal = ZERO
    monthly_average: Decimal = ZERO
    real_amount: Decimal | None = None
    pending_amount: Decimal | None = None

    def value_for(self, key: str) -> Decimal:
        if key == SORT_BY_TOTAL:
            return self.total
        if key == SORT_BY_AVERAGE:
            return self.monthly_average
        return self.monthly_data.get(str(PeriodKey.parse(key)), ZERO)


@dataclass(frozen=True, slots=True)
class SingleMonthRow:
    property_id: int
    property_name: str
    real_amount: Decimal
    pending_amount: Decimal
    total_result: Decimal
    original_cost: Decimal | None = None
    corrected_cost: Decimal | None = None
    profit_margin: Decimal | None = None


@dataclass(frozen=True, slots=True)
class SingleMonthView:
    """Real/pending/total split for one month, with weighted totals."""

    period: PeriodKey
    rows: list[SingleMonthRow]
    total_real: Decimal
    total_pending: Decimal
    total_result: Decimal
    total_corrected_cost: Decimal
    weighted_margin: Decimal | None


@dataclass(slots=True)
class PivotTable:
    month_headers: list[str]
    rows: list[PivotRow] = field(default_factory=list)
    column_totals: dict[str, Decimal] = field(default_factory=dict)
    grand_total: Decimal = ZERO
    grand_average: Decimal = ZERO
    sort: SortState = field(default_factory=SortState)
    single_month: SingleMonthView | None = None


def weighted_margin(pairs: Iterable[tuple[Decimal, Decimal | None]]) -> Decimal | None:
    """Return ``sum(result) / sum(cost) * 100`` over pairs whose cost is non-zero.

    ``pairs`` holds ``(total_result, corrected_cost)``. ``None`` when no pair
    carries a usable cost.
    """
    results = RunningTotal()
    costs = RunningTotal()
    for result, cost in pairs:
        if not cost:
            continue
        results.add(result)
        costs.add(cost)
    return percentage(results.value, costs.value)


def split_single_month(
    records: Iterable[TransactionRecord],
    period: PeriodKey,
    *,
    filters: TransactionFilter | None = None,
    cost_for: CostLookup | None = None,
) -> SingleMonthView:
    """Split one month's signed amounts per property into settled and pending parts."""
    filters = filters or TransactionFilter()
    names: dict[int, str] = {}
    real: dict[int, RunningTotal] = {}
    pending: dict[int, RunningTotal] = {}

    for record in records:
        if not period.contains(record.date) or not filters.matches(record):
            continue
        if record.property_id not in names:
            names[record.property_id] = record.property_name
            real[record.property_id] = RunningTotal()
            pending[record.property_id] = RunningTotal()
        bucket = pending if record.is_pending else real
        bucket[record.property_id].add(record.signed_amount)

    rows: list[SingleMonthRow] = []
    for property_id, name in names.items():
        real_amount = real[property_id].value
        pending_amount = pending[property_id].value
        total_result = money_sum((real_amount, pending_amount))
        cost = cost_for(property_id) if cost_for else None
        corrected = cost.corrected if cost else None
        rows.append(
            SingleMonthRow(
                property_id=property_id,
                property_name=name,
                real_amount=real_amount,
                pending_amount=pending_amount,
                total_result=total_result,
                original_cost=cost.original if cost else None,
                corrected_cost=corrected,
                profit_margin=percentage(total_result, corrected) if corrected else None,
            )
        )
    rows.sort(key=lambda row: (name_sort_key(row.property_name), row.property_name, row.property_id))

    return SingleMonthView(
        period=period,
        rows=rows,
        total_real=money_sum(row.real_amount for row in rows),
        total_pending=money_sum(row.pending_amount for row in rows),
        total_result=money_sum(row.total_result for row in rows),
        total_corrected_cost=money_sum(row.corrected_cost for row in rows if row.corrected_cost),
        weighted_margin=weighted_margin((row.total_result, row.corrected_cost) for row in rows),
    )


def sort_rows(rows: Sequence[PivotRow], sort: SortState) -> list[PivotRow]:
    """Return ``rows`` ordered by ``sort``; numeric ties keep the name order."""
    by_name = sorted(rows, key=lambda row: (name_sort_key(row.property_name), row.property_name, row.property_id))
    reverse = sort.direction is SortDirection.DESC
    if sort.key == SORT_BY_NAME:
        return list(reversed(by_name)) if reverse else by_name
    # sorted() is stable, so equal values stay in name order in both directions.
    return sorted(by_name, key=lambda row: row.value_for(sort.key), reverse=reverse)


class PivotEngine:
    """Builds :class:`PivotTable` values from transaction records."""

    def build(
        self,
        records: Iterable[TransactionRecord],
        periods: Iterable[PeriodKey],
        *,
        clock: ReferenceClock,
        filters: TransactionFilter | None = None,
        sort: SortState | None = None,
        cost_for: CostLookup | None = None,
    ) -> PivotTable:
        ordered = sort_periods(periods)
        sort = sort or SortState()
        table = PivotTable(month_headers=[str(period) for period in ordered], sort=sort)
        if not ordered:
            return table
        filters = filters or TransactionFilter()
        wanted = set(ordered)
        records = [record for record in records if record.period in wanted and filters.matches(record)]

        names: dict[int, str] = {}
        cells: dict[int, dict[PeriodKey, RunningTotal]] = {}
        columns = {period: RunningTotal() for period in ordered}
        for record in records:
            period = record.period
            if record.property_id not in cells:
                names[record.property_id] = record.property_name
                cells[record.property_id] = {p: RunningTotal() for p in ordered}
            cells[record.property_id][period].add(record.signed_amount)
            columns[period].add(record.signed_amount)

        count = len(ordered)
        rows = []
        for property_id, row_cells in cells.items():
            monthly = {str(period): row_cells[period].value for period in ordered}
            total = money_sum(monthly.values())
            rows.append(
                PivotRow(
                    property_id=property_id,
                    property_name=names[property_id],
                    monthly_data=monthly,
                    total=total,
                    monthly_average=divide(total, count),
                )
            )

        if ordered == [clock.current_month]:
            table.single_month = split_single_month(records, ordered[0], filters=filters, cost_for=cost_for)
            split = {row.property_id: row for row in table.single_month.rows}
            for row in rows:
                row.real_amount = split[row.property_id].real_amount
                row.pending_amount = split[row.property_id].pending_amount

        table.rows = sort_rows(rows, sort)
        table.column_totals = {str(period): columns[period].value for period in ordered}
        table.grand_total = money_sum(table.column_totals.values())
        table.grand_average = divide(table.grand_total, count)
        return table


__all__ = [
    "AcquisitionCost",
    "CostLookup",
    "PivotEngine",
    "PivotRow",
    "PivotTable",
    "SORT_BY_AVERAGE",
    "SORT_BY_NAME",
    "SORT_BY_TOTAL",
    "SingleMonthRow",
    "SingleMonthView",
    "SortDirection",
    "SortState",
    "name_sort_key",
    "sort_rows",
    "split_single_month",
    "weighted_margin",
]
