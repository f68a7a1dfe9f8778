"""Reference clock passed explicitly into date-sensitive calculations."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from zoneinfo import ZoneInfo

from rentledger.core.periods import PeriodKey


@dataclass(frozen=True, slots=True)
class ReferenceClock:
    """The "now" of a request, frozen at construction."""

    today: date

    @classmethod
    def system(cls, timezone: str) -> "ReferenceClock":
        return cls(today=datetime.now(ZoneInfo(timezone)).date())

    @property
    def current_month(self) -> PeriodKey:
        return PeriodKey.from_date(self.today)


__all__ = ["ReferenceClock"]
