from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from ..core.constants import MINUTES_PER_DAY
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuleConfig:
    """Business rules for turning punches into effective and paid time.

    Every value is a minute of day, except `break_credit_minutes` and
    `noon_minimum_break_minutes` which are durations.
    """

    start_limit_minutes: int = 8 * 60 + 30
    end_limit_minutes: int = 18 * 60 + 30
    morning_break_threshold_minutes: int = 11 * 60
    afternoon_break_threshold_minutes: int = 16 * 60
    break_credit_minutes: int = 7
    noon_window_start_minutes: int = 12 * 60
    noon_window_end_minutes: int = 14 * 60
    noon_minimum_break_minutes: int = 60

    def clamp(self, minute: int) -> int:
        return min(max(minute, self.start_limit_minutes), self.end_limit_minutes)

    def with_break_credit(self, minutes: int) -> "RuleConfig":
        return replace(self, break_credit_minutes=int(minutes))


def _read_int(settings: Any, name: str, default: int) -> int:
    raw = getattr(settings, name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def load_rules(settings: Any) -> RuleConfig:
    """Build the process-wide RuleConfig from a settings module."""
    defaults = RuleConfig()
    rules = RuleConfig(
        start_limit_minutes=_read_int(settings, "START_LIMIT_MINUTES", defaults.start_limit_minutes),
        end_limit_minutes=_read_int(settings, "END_LIMIT_MINUTES", defaults.end_limit_minutes),
        morning_break_threshold_minutes=_read_int(
            settings, "MORNING_BREAK_THRESHOLD", defaults.morning_break_threshold_minutes
        ),
        afternoon_break_threshold_minutes=_read_int(
            settings, "AFTERNOON_BREAK_THRESHOLD", defaults.afternoon_break_threshold_minutes
        ),
        break_credit_minutes=_read_int(settings, "PAUSE_TIME", defaults.break_credit_minutes),
        noon_window_start_minutes=_read_int(settings, "NOON_BREAK_START", defaults.noon_window_start_minutes),
        noon_window_end_minutes=_read_int(settings, "NOON_BREAK_END", defaults.noon_window_end_minutes),
        noon_minimum_break_minutes=_read_int(settings, "NOON_MINIMUM_BREAK", defaults.noon_minimum_break_minutes),
    )
    validate_rules(rules)
    logger.info(
        "Rules loaded: window %s-%s, credit %s min, noon %s-%s (min %s)",
        rules.start_limit_minutes,
        rules.end_limit_minutes,
        rules.break_credit_minutes,
        rules.noon_window_start_minutes,
        rules.noon_window_end_minutes,
        rules.noon_minimum_break_minutes,
    )
    return rules


def validate_rules(rules: RuleConfig) -> None:
    minute_fields = {
        "START_LIMIT_MINUTES": rules.start_limit_minutes,
        "END_LIMIT_MINUTES": rules.end_limit_minutes,
        "MORNING_BREAK_THRESHOLD": rules.morning_break_threshold_minutes,
        "AFTERNOON_BREAK_THRESHOLD": rules.afternoon_break_threshold_minutes,
        "NOON_BREAK_START": rules.noon_window_start_minutes,
        "NOON_BREAK_END": rules.noon_window_end_minutes,
    }
    for name, value in minute_fields.items():
        if not 0 <= value <= MINUTES_PER_DAY:
            raise ConfigurationError(f"{name} must be between 0 and {MINUTES_PER_DAY}, got {value}")

    if rules.break_credit_minutes < 0:
        raise ConfigurationError("PAUSE_TIME must not be negative")
    if rules.noon_minimum_break_minutes < 0:
        raise ConfigurationError("NOON_MINIMUM_BREAK must not be negative")
    if rules.start_limit_minutes >= rules.end_limit_minutes:
        raise ConfigurationError("START_LIMIT_MINUTES must be before END_LIMIT_MINUTES")
    if rules.noon_window_start_minutes >= rules.noon_window_end_minutes:
        raise ConfigurationError("NOON_BREAK_START must be before NOON_BREAK_END")
