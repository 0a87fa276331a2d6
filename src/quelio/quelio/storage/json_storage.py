from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from ..core.constants import LAST_SAVE_FORMAT
from ..core.exceptions import StorageError

logger = logging.getLogger(__name__)

KEY_PREFERENCES = "preferences"
KEY_TOKEN = "token"
KEY_WEEKS = "weeks"
KEY_LAST_SAVE = "last_save"


def _empty_user() -> dict[str, Any]:
    return {KEY_PREFERENCES: {}, KEY_TOKEN: None, KEY_WEEKS: {}}


class JsonFileStorage:
    """One JSON document keyed by username.

    Readers take a shared lock on the data file. Writers hold an exclusive
    lock on a sidecar `.lock` file for the whole read-modify-write and
    replace the data file atomically, so readers never see a partial write.
    """

    def __init__(self, path: str | os.PathLike, *, pretty: bool = False):
        self._path = Path(path)
        self._lock_path = self._path.with_name(self._path.name + ".lock")
        self._pretty = bool(pretty)

    @property
    def path(self) -> Path:
        return self._path

    def load_all(self) -> dict[str, dict[str, Any]]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r", encoding="utf-8") as fh:
                fcntl.flock(fh, fcntl.LOCK_SH)
                try:
                    content = fh.read()
                finally:
                    fcntl.flock(fh, fcntl.LOCK_UN)
        except OSError as exc:
            logger.warning("Cannot read %s: %s", self._path, exc)
            return {}

        try:
            data = json.loads(content) if content.strip() else {}
        except ValueError:
            logger.warning("Ignoring corrupt data file %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def get_user(self, username: str) -> Optional[dict[str, Any]]:
        return self.load_all().get(username)

    def save_weeks(
        self,
        username: str,
        weeks: dict[str, Any],
        *,
        token: Optional[str] = None,
        saved_at: Optional[datetime] = None,
    ) -> None:
        saved_at = saved_at or datetime.now()

        def apply(data: dict[str, Any]) -> None:
            previous = data.get(username) or {}
            data[username] = {
                KEY_PREFERENCES: previous.get(KEY_PREFERENCES) or {},
                KEY_TOKEN: token if token is not None else previous.get(KEY_TOKEN),
                KEY_WEEKS: weeks,
                KEY_LAST_SAVE: saved_at.strftime(LAST_SAVE_FORMAT),
            }

        self._update(apply)

    def save_preferences(self, username: str, preferences: dict[str, Any]) -> None:
        def apply(data: dict[str, Any]) -> None:
            user = data.setdefault(username, _empty_user())
            merged = dict(user.get(KEY_PREFERENCES) or {})
            merged.update(preferences)
            user[KEY_PREFERENCES] = merged

        self._update(apply)

    def get_preferences(self, username: str) -> dict[str, Any]:
        user = self.get_user(username) or {}
        return dict(user.get(KEY_PREFERENCES) or {})

    def get_token(self, username: str) -> Optional[str]:
        user = self.get_user(username) or {}
        return user.get(KEY_TOKEN)

    def invalidate_token(self, username: str) -> None:
        def apply(data: dict[str, Any]) -> None:
            if username in data:
                data[username].pop(KEY_TOKEN, None)

        self._update(apply)

    @contextmanager
    def _write_lock(self) -> Iterator[None]:
        with open(self._lock_path, "a") as lock:
            fcntl.flock(lock, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock, fcntl.LOCK_UN)

    def _update(self, apply: Callable[[dict[str, Any]], None]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._write_lock():
                data = self.load_all()
                apply(data)
                self._replace(data)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to write %s: %s", self._path, exc)
            raise StorageError(f"Unable to save data: {exc}") from exc

    def _replace(self, data: dict[str, Any]) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=self._path.name, suffix=".tmp", dir=self._path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2 if self._pretty else None)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
