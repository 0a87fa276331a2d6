from __future__ import annotations

import hmac
import logging
import math
from dataclasses import dataclass
from typing import Optional, Protocol

from ..core.enums import AuthMethod
from ..core.exceptions import AuthenticationError, AuthorizationError, PortalError, RateLimitedError
from ..storage.repository import UserDataRepository
from .rate_limiter import RateLimiter
from .token import TokenService

logger = logging.getLogger(__name__)


class PortalLogin(Protocol):
    def login(self, username: str, password: str) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class AuthContext:
    username: str
    password: str
    jsessionid: str
    method: AuthMethod
    token: Optional[str] = None


class AuthService:
    """Authenticate a caller by session token or by portal credentials.

    Either way the portal is logged in to exactly once, and the resulting
    JSESSIONID travels in the returned AuthContext.
    """

    def __init__(
        self,
        storage: UserDataRepository,
        tokens: TokenService,
        portal: PortalLogin,
        rate_limiter: RateLimiter,
        *,
        admin_username: str = "",
        admin_password: str = "",
    ):
        self._storage = storage
        self._tokens = tokens
        self._portal = portal
        self._rate_limiter = rate_limiter
        self._admin_username = admin_username or ""
        self._admin_password = admin_password or ""

    def authenticate(
        self,
        *,
        ip: str,
        token: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> AuthContext:
        ip = ip or "unknown"
        if self._rate_limiter.is_rate_limited(ip):
            retry_after = self._rate_limiter.time_until_reset(ip)
            logger.warning("Refusing login from rate limited client %s", ip)
            raise RateLimitedError(
                f"Too many login attempts. Please try again in {math.ceil(retry_after / 60)} minutes.",
                retry_after=retry_after,
            )

        if token:
            username, password = self._tokens.decode(token)
            if not self._is_current_token(username, token):
                raise AuthenticationError("Invalid or expired token", token_invalidated=True)
            method = AuthMethod.TOKEN
        else:
            if not username or not password:
                raise AuthenticationError(
                    "Authentication required: provide either a valid token or username/password"
                )
            method = AuthMethod.CREDENTIALS
            token = None

        try:
            jsessionid = self._portal.login(username, password)
        except PortalError as exc:
            self._rate_limiter.record_attempt(ip)
            self._storage.invalidate_token(username)

            message = f"Invalid username or password: {exc}"
            remaining = self._rate_limiter.remaining_attempts(ip)
            if remaining > 0:
                message += f" ({remaining} attempts remaining)"
            raise AuthenticationError(message, token_invalidated=True) from exc

        self._rate_limiter.reset_attempts(ip)
        return AuthContext(
            username=username,
            password=password,
            jsessionid=jsessionid,
            method=method,
            token=token,
        )

    def check_admin(self, username: Optional[str], password: Optional[str]) -> None:
        if not self._admin_username or not self._admin_password:
            raise AuthorizationError("Admin access is disabled")

        user_ok = hmac.compare_digest((username or "").encode(), self._admin_username.encode())
        password_ok = hmac.compare_digest((password or "").encode(), self._admin_password.encode())
        if not (user_ok and password_ok):
            raise AuthorizationError("Invalid username or password")

    def _is_current_token(self, username: str, token: str) -> bool:
        stored = self._storage.get_token(username)
        return bool(stored) and hmac.compare_digest(stored.encode(), token.encode())
