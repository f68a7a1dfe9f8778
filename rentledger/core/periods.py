"""Calendar-month period keys (``MM/YYYY``)."""
from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from rentledger.core.errors import ValidationError

_PERIOD_PATTERN = re.compile(r"^(\d{1,2})/(\d{4})$")

MIN_YEAR = 1
MAX_YEAR = 9998


@dataclass(frozen=True, order=True, slots=True)
class PeriodKey:
    """A calendar month. Ordering is chronological: year first, then month."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValidationError(f"Invalid month {self.month} in period key", field="months")
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise ValidationError(f"Year {self.year} is outside {MIN_YEAR}..{MAX_YEAR}", field="months")

    @classmethod
    def parse(cls, raw: str) -> "PeriodKey":
        match = _PERIOD_PATTERN.match(raw.strip()) if isinstance(raw, str) else None
        if match is None:
            raise ValidationError(f"Period key '{raw}' must use the MM/YYYY format", field="months")
        return cls(year=int(match.group(2)), month=int(match.group(1)))

    @classmethod
    def from_date(cls, value: date) -> "PeriodKey":
        return cls(year=value.year, month=value.month)

    def contains(self, value: date) -> bool:
        return value.year == self.year and value.month == self.month

    def previous(self) -> "PeriodKey":
        if self.month == 1:
            return PeriodKey(year=self.year - 1, month=12)
        return PeriodKey(year=self.year, month=self.month - 1)

    def following(self) -> "PeriodKey":
        if self.month == 12:
            return PeriodKey(year=self.year + 1, month=1)
        return PeriodKey(year=self.year, month=self.month + 1)

    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    @property
    def compact(self) -> str:
        """``YYYYMM`` form used by the IBGE API."""
        return f"{self.year:04d}{self.month:02d}"

    def __str__(self) -> str:
        return f"{self.month:02d}/{self.year:04d}"


def parse_periods(raw: Iterable[str]) -> list[PeriodKey]:
    """Parse, de-duplicate and chronologically sort period keys."""
    return sort_periods(PeriodKey.parse(item) for item in raw if item and item.strip())


def sort_periods(periods: Iterable[PeriodKey]) -> list[PeriodKey]:
    return sorted(set(periods))


__all__ = ["MAX_YEAR", "MIN_YEAR", "PeriodKey", "parse_periods", "sort_periods"]
