from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from ..common.datetime_utils import format_minutes, minute_of_day, parse_day_key, to_minutes
from ..core.enums import BreakZone
from .model import Adjustment, BreakDurations, DayBreakdown, WeekBreakdown
from .rules import RuleConfig

Session = Tuple[int, int]


@dataclass
class _DayAccumulator:
    """Running state of one day while its sessions are walked in order.

    Each break credit is granted at most once, by the first session whose
    clamped end reaches the matching threshold.
    """

    rules: RuleConfig
    effective: int = 0
    credit_granted: int = 0
    morning_credited: bool = False
    afternoon_credited: bool = False
    adjustments: List[Adjustment] = field(default_factory=list)

    @property
    def paid(self) -> int:
        return self.effective + sum(a.signed_minutes for a in self.adjustments)

    def add_session(self, start: int, end: int) -> None:
        self.effective += end - start

        if not self.morning_credited and end >= self.rules.morning_break_threshold_minutes:
            self.morning_credited = True
            self._credit("morning break")

        if not self.afternoon_credited and end >= self.rules.afternoon_break_threshold_minutes:
            self.afternoon_credited = True
            self._credit("afternoon break")

    def apply_noon_rule(self, observed: int) -> None:
        minimum = self.rules.noon_minimum_break_minutes
        if observed >= minimum:
            return

        # Only credit already granted can be taken back
        deduction = min(minimum - observed, self.credit_granted)
        if deduction <= 0:
            return

        reason = f"{format_minutes(minimum)} (minimum) - {format_minutes(observed)} (noon break)"
        self.adjustments.append(Adjustment("-", deduction, reason))

    def _credit(self, reason: str) -> None:
        credit = self.rules.break_credit_minutes
        self.credit_granted += credit
        self.adjustments.append(Adjustment("+", credit, reason))


class TimeAccountant:
    """Turn merged per-day punches into effective and paid durations.

    The accountant is a pure function of its inputs: the current time is
    always passed in by the caller.
    """

    def __init__(self, rules: RuleConfig):
        self._rules = rules

    def compute_day(
        self,
        day: str,
        punches: Sequence[str],
        *,
        is_today: bool = False,
        now_minute_of_day: int = 0,
        rules: Optional[RuleConfig] = None,
    ) -> DayBreakdown:
        rules = rules or self._rules
        sessions = self._sessions(punches, rules, is_today=is_today, now_minute_of_day=now_minute_of_day)

        acc = _DayAccumulator(rules)
        for start, end in sessions:
            acc.add_session(start, end)

        gaps = [(prev[1], nxt[0]) for prev, nxt in zip(sessions, sessions[1:])]

        noon_gap = self._first_noon_gap(gaps, rules)
        if noon_gap is not None:
            acc.apply_noon_rule(noon_gap)

        return DayBreakdown(
            date=day,
            hours=tuple(punches),
            breaks=self._classify_breaks(gaps, rules),
            effective_minutes=acc.effective,
            paid_minutes=acc.paid,
            adjustments=tuple(acc.adjustments),
        )

    def roll_up_by_week(self, days: Mapping[str, DayBreakdown]) -> Dict[str, WeekBreakdown]:
        """Group day breakdowns by ISO week, keyed `YYYY-w-WW`."""
        grouped: Dict[str, Dict[str, DayBreakdown]] = {}

        for key in sorted(days, key=parse_day_key):
            grouped.setdefault(week_key(parse_day_key(key)), {})[key] = days[key]

        return {
            week: WeekBreakdown(
                days=week_days,
                total_effective_minutes=sum(d.effective_minutes for d in week_days.values()),
                total_paid_minutes=sum(d.paid_minutes for d in week_days.values()),
            )
            for week, week_days in grouped.items()
        }

    def compute_weeks(self, merged: Mapping[str, Sequence[str]], *, now: datetime) -> Dict[str, WeekBreakdown]:
        """Full accounting run: every day, then the weekly roll-up.

        `now` must already be expressed in the portal's timezone; it decides
        which day is today and where an open session ends.
        """
        return self.roll_up_by_week(self._compute_days(merged, self._rules, now))

    def compute_total(
        self,
        merged: Mapping[str, Sequence[str]],
        *,
        pause_minutes_per_credit: int,
        now: datetime,
    ) -> int:
        """Sum of paid minutes over every day, with a custom break credit.

        A credit of 0 yields plain effective time.
        """
        rules = self._rules.with_break_credit(pause_minutes_per_credit)
        return sum(d.paid_minutes for d in self._compute_days(merged, rules, now).values())

    def _compute_days(
        self,
        merged: Mapping[str, Sequence[str]],
        rules: RuleConfig,
        now: datetime,
    ) -> Dict[str, DayBreakdown]:
        today = now.date()
        now_minute = minute_of_day(now)

        result: Dict[str, DayBreakdown] = {}
        for key in sorted(merged, key=parse_day_key):
            result[key] = self.compute_day(
                key,
                merged[key],
                is_today=parse_day_key(key) == today,
                now_minute_of_day=now_minute,
                rules=rules,
            )
        return result

    @staticmethod
    def _sessions(
        punches: Sequence[str],
        rules: RuleConfig,
        *,
        is_today: bool,
        now_minute_of_day: int,
    ) -> List[Session]:
        minutes = [to_minutes(p) for p in punches]

        if len(minutes) % 2:
            if is_today:
                # Still clocked in: the open session runs until now, never before its start
                minutes.append(max(now_minute_of_day, minutes[-1]))
            else:
                minutes.pop()

        return [(rules.clamp(start), rules.clamp(end)) for start, end in zip(minutes[0::2], minutes[1::2])]

    @staticmethod
    def _first_noon_gap(gaps: Sequence[Session], rules: RuleConfig) -> Optional[int]:
        window_start = rules.noon_window_start_minutes
        window_end = rules.noon_window_end_minutes

        for gap_start, gap_end in gaps:
            # A zero-length gap starting inside the window is a skipped lunch
            if gap_start < window_end and (gap_end > window_start or gap_start >= window_start):
                return min(gap_end, window_end) - max(gap_start, window_start)
        return None

    @staticmethod
    def _classify_breaks(gaps: Sequence[Session], rules: RuleConfig) -> BreakDurations:
        totals = {zone: 0 for zone in BreakZone}

        for gap_start, gap_end in gaps:
            if gap_start < rules.noon_window_start_minutes:
                zone = BreakZone.MORNING
            elif gap_start < rules.noon_window_end_minutes and gap_end <= rules.noon_window_end_minutes:
                zone = BreakZone.NOON
            else:
                zone = BreakZone.AFTERNOON
            totals[zone] += gap_end - gap_start

        return BreakDurations(
            morning=totals[BreakZone.MORNING],
            noon=totals[BreakZone.NOON],
            afternoon=totals[BreakZone.AFTERNOON],
        )


def week_key(day: date) -> str:
    iso = day.isocalendar()
    return f"{iso[0]}-w-{iso[1]:02d}"
