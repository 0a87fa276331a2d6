from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Protocol


class UserDataRepository(Protocol):
    """Per-user cache of the last accounting snapshot, token and preferences."""

    def load_all(self) -> dict[str, dict[str, Any]]:
        raise NotImplementedError

    def get_user(self, username: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    def save_weeks(
        self,
        username: str,
        weeks: dict[str, Any],
        *,
        token: Optional[str] = None,
        saved_at: Optional[datetime] = None,
    ) -> None:
        """Replace the user's weeks; keeps preferences, and the token when none is given."""

        raise NotImplementedError

    def save_preferences(self, username: str, preferences: dict[str, Any]) -> None:
        raise NotImplementedError

    def get_preferences(self, username: str) -> dict[str, Any]:
        raise NotImplementedError

    def get_token(self, username: str) -> Optional[str]:
        raise NotImplementedError

    def invalidate_token(self, username: str) -> None:
        raise NotImplementedError
