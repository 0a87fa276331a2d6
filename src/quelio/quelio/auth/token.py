from __future__ import annotations

import json
from typing import Tuple

from cryptography.fernet import Fernet, InvalidToken

from ..core.exceptions import AuthenticationError, ConfigurationError


class TokenService:
    """Opaque session tokens carrying the portal credentials.

    The portal has no API key, so the password must be recoverable to log in
    again on the next visit; tokens are therefore encrypted, not hashed.
    `max_age` is in seconds, 0 meaning tokens never expire.
    """

    def __init__(self, encryption_key: str | bytes, *, max_age: int = 0):
        if not encryption_key:
            raise ConfigurationError("ENCRYPTION_KEY is required")
        key = encryption_key.encode() if isinstance(encryption_key, str) else encryption_key
        try:
            self._fernet = Fernet(key)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError("ENCRYPTION_KEY must be a urlsafe base64-encoded 32-byte key") from exc
        self._max_age = int(max_age)

    def issue(self, username: str, password: str) -> str:
        payload = json.dumps({"u": username, "p": password}, separators=(",", ":"))
        return self._fernet.encrypt(payload.encode("utf-8")).decode("ascii")

    def decode(self, token: str) -> Tuple[str, str]:
        try:
            raw = self._fernet.decrypt(token.encode("ascii"), ttl=self._max_age or None)
            payload = json.loads(raw.decode("utf-8"))
            return str(payload["u"]), str(payload["p"])
        except (InvalidToken, UnicodeError, ValueError, KeyError, TypeError, AttributeError) as exc:
            raise AuthenticationError("Invalid or expired token", token_invalidated=True) from exc
