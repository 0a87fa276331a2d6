from datetime import datetime

import pytest

from src.quelio.quelio.common.datetime_utils import format_minutes, to_minutes
from src.quelio.quelio.core.exceptions import MalformedPunchError
from src.quelio.quelio.timesheet.accountant import TimeAccountant
from src.quelio.quelio.timesheet.rules import RuleConfig


@pytest.fixture
def accountant():
    return TimeAccountant(RuleConfig())


def _day(accountant, punches, **kwargs):
    return accountant.compute_day("13-01-2026", punches, **kwargs)


def test_full_day_with_one_hour_lunch_gets_both_credits(accountant):
    day = _day(accountant, ["08:30", "12:00", "13:00", "18:30"])

    assert format_minutes(day.effective_minutes) == "09:00"
    assert format_minutes(day.paid_minutes) == "09:14"
    assert [str(a) for a in day.adjustments] == [
        "+ 00:07 => morning break",
        "+ 00:07 => afternoon break",
    ]
    assert day.breaks.noon == 60


def test_short_lunch_deduction_is_capped_by_granted_credit(accountant):
    day = _day(accountant, ["08:30", "12:00", "12:47", "18:30"])

    assert format_minutes(day.effective_minutes) == "09:13"
    assert format_minutes(day.paid_minutes) == "09:14"
    assert str(day.adjustments[-1]) == "- 00:13 => 01:00 (minimum) - 00:47 (noon break)"


def test_day_without_any_gap_skips_noon_rule(accountant):
    day = _day(accountant, ["08:30", "18:30"])

    assert format_minutes(day.effective_minutes) == "10:00"
    assert format_minutes(day.paid_minutes) == "10:14"
    assert len(day.adjustments) == 2


def test_thirty_minute_lunch_claws_back_all_credit(accountant):
    day = _day(accountant, ["08:30", "12:00", "12:30", "18:30"])

    assert format_minutes(day.effective_minutes) == "09:30"
    assert day.paid_minutes == day.effective_minutes
    assert len(day.adjustments) == 3
    assert str(day.adjustments[-1]).startswith("- 00:14 => ")


def test_deduction_uses_overlap_of_first_noon_gap(accountant):
    day = accountant.compute_day("21-01-2026", ["08:31", "10:41", "10:47", "12:14", "13:08", "17:36"])

    assert str(day.adjustments[-1]) == "- 00:06 => 01:00 (minimum) - 00:54 (noon break)"
    assert day.breaks.morning == 6
    assert day.breaks.noon == 54
    assert day.breaks.afternoon == 0
    assert day.paid_minutes == day.effective_minutes + 14 - 6


def test_morning_gap_before_noon_window_is_ignored_by_noon_rule(accountant):
    day = _day(accountant, ["08:30", "10:00", "10:15", "12:00", "12:30", "18:30"])

    assert format_minutes(day.effective_minutes) == "09:15"
    assert format_minutes(day.paid_minutes) == "09:15"
    assert day.breaks.morning == 15
    assert day.breaks.noon == 30


def test_zero_minute_lunch_claws_back_all_credit(accountant):
    day = _day(accountant, ["08:30", "12:00", "12:00", "18:30"])

    assert format_minutes(day.effective_minutes) == "10:00"
    assert day.paid_minutes == day.effective_minutes
    assert str(day.adjustments[-1]) == "- 00:14 => 01:00 (minimum) - 00:00 (noon break)"
    assert day.breaks.noon == 0


def test_shorter_lunch_never_pays_more(accountant):
    skipped = _day(accountant, ["08:30", "12:00", "12:00", "18:30"])
    one_minute = _day(accountant, ["08:30", "12:00", "12:01", "18:30"])

    assert skipped.paid_minutes >= one_minute.paid_minutes
    assert skipped.paid_minutes - skipped.effective_minutes == 0


def test_long_lunch_has_no_deduction(accountant):
    day = _day(accountant, ["08:30", "12:00", "13:30", "18:30"])

    assert format_minutes(day.effective_minutes) == "08:30"
    assert format_minutes(day.paid_minutes) == "08:44"


def test_lunch_outside_noon_window_is_a_morning_break(accountant):
    day = _day(accountant, ["08:30", "11:00", "11:30", "18:30"])

    assert format_minutes(day.effective_minutes) == "09:30"
    assert format_minutes(day.paid_minutes) == "09:44"
    assert day.breaks.morning == 30
    assert day.breaks.noon == 0


def test_gap_running_past_noon_window_counts_as_afternoon_break(accountant):
    day = _day(accountant, ["08:30", "13:30", "14:30", "18:30"])

    assert day.breaks.afternoon == 60
    assert day.breaks.noon == 0
    # only 30 minutes of the gap fall inside 12:00-14:00
    assert str(day.adjustments[-1]) == "- 00:14 => 01:00 (minimum) - 00:30 (noon break)"


def test_short_morning_has_no_adjustments(accountant):
    day = _day(accountant, ["08:30", "10:30"])

    assert format_minutes(day.effective_minutes) == "02:00"
    assert day.adjustments == ()
    assert day.paid_minutes == day.effective_minutes


def test_punches_outside_limits_are_clamped(accountant):
    day = _day(accountant, ["06:45", "20:15"])

    assert format_minutes(day.effective_minutes) == "10:00"


def test_open_session_today_ends_now(accountant):
    day = _day(accountant, ["08:31"], is_today=True, now_minute_of_day=to_minutes("12:10"))

    assert format_minutes(day.effective_minutes) == "03:39"
    assert format_minutes(day.paid_minutes) == "03:46"


def test_open_session_before_morning_threshold_gets_no_credit(accountant):
    day = _day(accountant, ["08:31"], is_today=True, now_minute_of_day=to_minutes("10:15"))

    assert format_minutes(day.effective_minutes) == "01:44"
    assert day.adjustments == ()


def test_open_session_today_never_ends_before_its_start(accountant):
    day = _day(accountant, ["08:31"], is_today=True, now_minute_of_day=to_minutes("08:00"))

    assert day.effective_minutes == 0
    assert day.paid_minutes == 0


def test_unpaired_punch_on_past_day_is_dropped(accountant):
    day = _day(accountant, ["08:30", "12:00", "13:00"])

    assert format_minutes(day.effective_minutes) == "03:30"
    assert day.hours == ("08:30", "12:00", "13:00")


def test_empty_day_is_zero(accountant):
    day = _day(accountant, [])

    assert day.effective_minutes == 0
    assert day.paid_minutes == 0
    assert day.adjustments == ()


def test_compute_day_is_idempotent(accountant):
    punches = ["08:31", "10:41", "10:47", "12:14", "13:08"]

    first = _day(accountant, punches, is_today=True, now_minute_of_day=1000)
    second = _day(accountant, punches, is_today=True, now_minute_of_day=1000)

    assert first == second


@pytest.mark.parametrize(
    "punches",
    [
        ["08:30", "12:00", "12:01", "18:30"],
        ["08:30", "12:30", "12:35", "15:00"],
        ["09:00", "11:30", "11:55", "12:10", "12:20", "17:00"],
        ["08:00", "13:59", "14:00", "19:00"],
    ],
)
def test_noon_rule_never_pushes_paid_below_effective(accountant, punches):
    day = _day(accountant, punches)

    assert day.paid_minutes >= day.effective_minutes


def test_malformed_punch_raises(accountant):
    with pytest.raises(MalformedPunchError):
        _day(accountant, ["08:30", "25:00"])


def test_day_breakdown_to_dict(accountant):
    data = _day(accountant, ["08:30", "12:00", "12:47", "18:30"]).to_dict()

    assert data == {
        "hours": ["08:30", "12:00", "12:47", "18:30"],
        "breaks": {"morning": "00:00", "noon": "00:47", "afternoon": "00:00"},
        "effective": "09:13",
        "paid": "09:14",
        "effective_to_paid": [
            "+ 00:07 => morning break",
            "+ 00:07 => afternoon break",
            "- 00:13 => 01:00 (minimum) - 00:47 (noon break)",
        ],
    }


def test_compute_total_with_and_without_pause(accountant):
    merged = {
        "13-01-2026": ["08:30", "12:00", "13:00", "18:30"],
        "14-01-2026": ["08:30", "18:30"],
    }
    now = datetime(2026, 1, 20, 9, 0)

    assert accountant.compute_total(merged, pause_minutes_per_credit=0, now=now) == 19 * 60
    assert format_minutes(accountant.compute_total(merged, pause_minutes_per_credit=7, now=now)) == "19:28"
