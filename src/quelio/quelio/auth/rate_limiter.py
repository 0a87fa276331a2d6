from __future__ import annotations

import fcntl
import json
import logging
import os
import time
from pathlib import Path
from typing import Callable

from ..core.exceptions import StorageError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window counter of failed logins per client IP.

    Attempts are unix timestamps stored in a small JSON file so every worker
    process shares the same view.
    """

    def __init__(
        self,
        path: str | os.PathLike,
        *,
        max_attempts: int = 5,
        window_seconds: int = 900,
        clock: Callable[[], float] = time.time,
    ):
        self._path = Path(path)
        self._max_attempts = int(max_attempts)
        self._window = int(window_seconds)
        self._clock = clock

    def is_rate_limited(self, ip: str) -> bool:
        return len(self._recent(ip)) >= self._max_attempts

    def record_attempt(self, ip: str) -> None:
        data = self._load()
        attempts = self._within_window(data.get(ip, []))
        attempts.append(int(self._clock()))
        data[ip] = attempts
        self._save(data)

    def reset_attempts(self, ip: str) -> None:
        data = self._load()
        if data.pop(ip, None) is not None:
            self._save(data)

    def remaining_attempts(self, ip: str) -> int:
        return max(0, self._max_attempts - len(self._recent(ip)))

    def time_until_reset(self, ip: str) -> int:
        """Seconds until the oldest counted attempt expires; 0 when not limited."""
        recent = self._recent(ip)
        if len(recent) < self._max_attempts:
            return 0
        return max(0, int(min(recent) + self._window - self._clock()))

    def cleanup(self) -> None:
        data = self._load()
        cleaned: dict[str, list[int]] = {}
        for ip, attempts in data.items():
            kept = self._within_window(attempts)
            if kept:
                cleaned[ip] = kept
        if cleaned != data:
            self._save(cleaned)

    def _recent(self, ip: str) -> list[int]:
        return self._within_window(self._load().get(ip, []))

    def _within_window(self, attempts: list) -> list[int]:
        now = self._clock()
        return [int(ts) for ts in attempts if now - int(ts) < self._window]

    def _load(self) -> dict[str, list[int]]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable rate limit file %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, list[int]]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "a+", encoding="utf-8") as fh:
                fcntl.flock(fh, fcntl.LOCK_EX)
                try:
                    fh.seek(0)
                    fh.truncate()
                    json.dump(data, fh)
                    fh.flush()
                finally:
                    fcntl.flock(fh, fcntl.LOCK_UN)
        except OSError as exc:
            logger.error("Failed to write rate limit file %s: %s", self._path, exc)
            raise StorageError(f"Unable to save rate limit data: {exc}") from exc
