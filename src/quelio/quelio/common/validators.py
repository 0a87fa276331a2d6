from __future__ import annotations

import re
from typing import Any, Mapping

from ..core.constants import DEFAULT_THEME_MAX_LENGTH, MINUTES_PER_DAY
from ..core.exceptions import ValidationError

_THEME_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


def validate_preferences(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Keep the known preference keys, or raise with one message per bad field."""
    preferences: dict[str, Any] = {}
    errors: dict[str, str] = {}

    if raw.get("theme") is not None:
        theme = str(raw["theme"]).strip()
        if _THEME_RE.match(theme) and len(theme) <= DEFAULT_THEME_MAX_LENGTH:
            preferences["theme"] = theme
        else:
            errors["theme"] = (
                "Invalid theme format. Only alphanumeric, underscore and dash allowed "
                f"(max {DEFAULT_THEME_MAX_LENGTH} chars)"
            )

    if raw.get("minutes_objective") is not None:
        try:
            objective = int(str(raw["minutes_objective"]).strip())
        except ValueError:
            objective = 0
        if 0 < objective <= MINUTES_PER_DAY:
            preferences["minutes_objective"] = objective
        else:
            errors["minutes_objective"] = f"Invalid minutes objective. Must be between 1 and {MINUTES_PER_DAY}"

    if errors:
        raise ValidationError("Validation failed", errors)
    if not preferences:
        raise ValidationError("No valid preferences provided")
    return preferences
