from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

from ..common.datetime_utils import format_minutes

# date (DD/MM/YYYY) -> raw punch strings, as scraped from one portal page
RawFragment = Mapping[str, Sequence[str]]
# date (DD-MM-YYYY) -> punches sorted ascending as HH:MM strings
DayPunches = List[str]


@dataclass(frozen=True)
class Adjustment:
    """One step applied while turning effective time into paid time."""

    sign: str
    minutes: int
    reason: str

    @property
    def signed_minutes(self) -> int:
        return self.minutes if self.sign == "+" else -self.minutes

    def __str__(self) -> str:
        return f"{self.sign} {format_minutes(self.minutes)} => {self.reason}"


@dataclass(frozen=True)
class BreakDurations:
    """Observed gaps between sessions, grouped by the zone they start in."""

    morning: int = 0
    noon: int = 0
    afternoon: int = 0

    def to_dict(self) -> Dict[str, str]:
        return {
            "morning": format_minutes(self.morning),
            "noon": format_minutes(self.noon),
            "afternoon": format_minutes(self.afternoon),
        }


@dataclass(frozen=True)
class DayBreakdown:
    date: str
    hours: tuple[str, ...]
    breaks: BreakDurations
    effective_minutes: int
    paid_minutes: int
    adjustments: tuple[Adjustment, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hours": list(self.hours),
            "breaks": self.breaks.to_dict(),
            "effective": format_minutes(self.effective_minutes),
            "paid": format_minutes(self.paid_minutes),
            "effective_to_paid": [str(a) for a in self.adjustments],
        }


@dataclass(frozen=True)
class WeekBreakdown:
    """Days of one ISO week, keyed by DD-MM-YYYY, with their totals."""

    days: Mapping[str, DayBreakdown] = field(default_factory=dict)
    total_effective_minutes: int = 0
    total_paid_minutes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "days": {key: day.to_dict() for key, day in self.days.items()},
            "total_effective": format_minutes(self.total_effective_minutes),
            "total_paid": format_minutes(self.total_paid_minutes),
        }


def weeks_to_dict(weeks: Mapping[str, WeekBreakdown]) -> Dict[str, Any]:
    return {key: week.to_dict() for key, week in weeks.items()}
