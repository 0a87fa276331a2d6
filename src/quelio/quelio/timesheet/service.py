from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence
from zoneinfo import ZoneInfo

from ..auth.service import AuthContext
from ..auth.token import TokenService
from ..common.datetime_utils import now_local
from ..common.validators import validate_preferences
from ..core.constants import DEFAULT_TIMEZONE, LAST_SAVE_FORMAT
from ..core.enums import AuthMethod
from ..core.exceptions import PortalError, ValidationError
from ..storage.repository import UserDataRepository
from .accountant import TimeAccountant
from .merger import HourMerger
from .model import weeks_to_dict

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Failed to fetch fresh data, using cached data"


class HoursSource(Protocol):
    def fetch_fragments(self, jsessionid: str) -> List[Mapping[str, Sequence[str]]]:
        raise NotImplementedError


class TimesheetService:
    """Fetch, merge, account and persist one user's punches."""

    def __init__(
        self,
        portal: HoursSource,
        storage: UserDataRepository,
        tokens: TokenService,
        *,
        merger: Optional[HourMerger] = None,
        accountant: TimeAccountant,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self._portal = portal
        self._storage = storage
        self._tokens = tokens
        self._merger = merger or HourMerger()
        self._accountant = accountant
        self._timezone = timezone

    def refresh(self, context: AuthContext, *, now: datetime | None = None) -> Dict[str, Any]:
        now = self._localize(now)
        token = self._token_for(context)

        try:
            fragments = self._portal.fetch_fragments(context.jsessionid)
        except PortalError as exc:
            logger.warning("Portal fetch failed for %s, falling back to cache: %s", context.username, exc)
            return self._fallback(context, token)

        try:
            merged = self._merger.merge(fragments)
            weeks = weeks_to_dict(self._accountant.compute_weeks(merged, now=now))
        except ValidationError as exc:
            logger.warning("Unusable portal data for %s, falling back to cache: %s", context.username, exc)
            return self._fallback(context, token)

        self._storage.save_weeks(context.username, weeks, token=token, saved_at=now)

        return {
            "username": context.username,
            "authenticated_with": context.method.value,
            "token": token,
            "preferences": self._storage.get_preferences(context.username),
            "weeks": weeks,
            "last_save": now.strftime(LAST_SAVE_FORMAT),
            "cache": False,
        }

    def update_preferences(self, username: str, raw: Mapping[str, Any]) -> Dict[str, Any]:
        preferences = validate_preferences(raw)
        self._storage.save_preferences(username, preferences)
        return self._storage.get_user(username) or {}

    def dump_all(self) -> Dict[str, Any]:
        return self._storage.load_all()

    def _fallback(self, context: AuthContext, token: str) -> Dict[str, Any]:
        cached = self._storage.get_user(context.username)
        if not cached or not cached.get("weeks"):
            raise PortalError("No fresh data available and no cached data found")

        if cached.get("token") != token:
            self._storage.save_weeks(
                context.username,
                cached["weeks"],
                token=token,
                saved_at=self._parse_last_save(cached.get("last_save")),
            )

        return {
            "username": context.username,
            "authenticated_with": context.method.value,
            "token": token,
            "preferences": dict(cached.get("preferences") or {}),
            "weeks": cached["weeks"],
            "last_save": cached.get("last_save"),
            "cache": True,
            "fallback": True,
            "error": FALLBACK_MESSAGE,
        }

    def _token_for(self, context: AuthContext) -> str:
        # Fresh credentials may carry a changed password, so they get a new token
        if context.method is AuthMethod.TOKEN and context.token:
            return context.token
        return self._tokens.issue(context.username, context.password)

    def _localize(self, now: datetime | None) -> datetime:
        if now is None:
            return now_local(self._timezone)
        if now.tzinfo is None:
            return now
        return now.astimezone(ZoneInfo(self._timezone))

    def _parse_last_save(self, value: Optional[str]) -> Optional[datetime]:
        if not value:
            return None
        try:
            return datetime.strptime(value, LAST_SAVE_FORMAT)
        except ValueError:
            return None
