from __future__ import annotations

from enum import Enum


class AuthMethod(str, Enum):
    """How the current request proved who it is."""

    TOKEN = "token"
    CREDENTIALS = "credentials"


class BreakZone(str, Enum):
    """Part of the day a break is reported under."""

    MORNING = "morning"
    NOON = "noon"
    AFTERNOON = "afternoon"
