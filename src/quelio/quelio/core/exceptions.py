from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, fields: dict[str, str] | None = None):
        super().__init__(message)
        self.fields = dict(fields or {})


class MalformedPunchError(ValidationError):
    """Raised when a punch is not an HH:MM time of day."""


class ConfigurationError(DomainError):
    """Raised when startup settings cannot produce a usable rule set."""


class AuthenticationError(DomainError):
    """Raised when credentials or a session token are rejected."""

    def __init__(self, message: str, *, token_invalidated: bool = False):
        super().__init__(message)
        self.token_invalidated = token_invalidated


class AuthorizationError(DomainError):
    """Raised when a caller lacks permission for an action."""


class RateLimitedError(DomainError):
    """Raised when a client exhausted its login attempts."""

    def __init__(self, message: str, *, retry_after: int):
        super().__init__(message)
        self.retry_after = int(retry_after)


class PortalError(DomainError):
    """Raised when the upstream time-tracking portal cannot be used."""


class PortalLoginError(PortalError):
    """Raised when the portal refuses the login."""


class StorageError(DomainError):
    """Raised when the local cache cannot be written."""
