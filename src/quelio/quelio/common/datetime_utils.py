from __future__ import annotations

import re
from datetime import date, datetime
from zoneinfo import ZoneInfo

from ..core.constants import DAY_KEY_FORMAT, DEFAULT_TIMEZONE
from ..core.exceptions import MalformedPunchError, ValidationError

_PUNCH_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def to_minutes(value: str) -> int:
    """Convert an HH:MM punch into minutes since midnight."""
    match = _PUNCH_RE.match(value or "")
    if not match:
        raise MalformedPunchError(f"Invalid punch time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise MalformedPunchError(f"Invalid punch time: {value!r}")
    return hours * 60 + minutes


def format_minutes(total: int) -> str:
    """Render a duration as HH:MM; hours may exceed 24."""
    sign = "-" if total < 0 else ""
    total = abs(int(total))
    return f"{sign}{total // 60:02d}:{total % 60:02d}"


def parse_day_key(value: str) -> date:
    """Parse a DD-MM-YYYY day key."""
    try:
        return datetime.strptime(value, DAY_KEY_FORMAT).date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid day: {value!r}") from exc


def minute_of_day(value: datetime) -> int:
    return value.hour * 60 + value.minute


def now_local(tz_name: str = DEFAULT_TIMEZONE) -> datetime:
    """Current time in the portal's civil timezone.

    Note: Wrapped so tests can patch/mock it easier.
    """
    return datetime.now(ZoneInfo(tz_name))
