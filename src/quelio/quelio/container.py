from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from .assets.service import AssetService
from .auth.rate_limiter import RateLimiter
from .auth.service import AuthService
from .auth.token import TokenService
from .core.constants import DEFAULT_TIMEZONE
from .portal.client import KelioClient
from .storage.json_storage import JsonFileStorage
from .timesheet.accountant import TimeAccountant
from .timesheet.merger import HourMerger
from .timesheet.rules import RuleConfig, load_rules
from .timesheet.service import TimesheetService


@dataclass(frozen=True)
class Container:
    rules: RuleConfig

    storage: JsonFileStorage
    rate_limiter: RateLimiter
    kelio_client: KelioClient
    token_service: TokenService

    auth_service: AuthService
    timesheet_service: TimesheetService
    asset_service: AssetService


def build_container(
    *,
    settings: Any,
    session_factory: Optional[Callable[[], requests.Session]] = None,
) -> Container:
    rules = load_rules(settings)
    debug = bool(getattr(settings, "DEBUG", False))

    storage = JsonFileStorage(getattr(settings, "DATA_FILE"), pretty=debug)
    rate_limiter = RateLimiter(
        getattr(settings, "RATE_LIMIT_FILE"),
        max_attempts=int(getattr(settings, "RATE_LIMIT_MAX_ATTEMPTS", 5)),
        window_seconds=int(getattr(settings, "RATE_LIMIT_WINDOW", 900)),
    )
    kelio_client = KelioClient(
        getattr(settings, "KELIO_URL"),
        timeout=float(getattr(settings, "KELIO_TIMEOUT", 15)),
        verify_ssl=bool(getattr(settings, "KELIO_VERIFY_SSL", True)),
        page_offsets=getattr(settings, "KELIO_PAGE_OFFSETS", (0, 4, 8)),
        session_factory=session_factory or requests.Session,
    )
    token_service = TokenService(
        getattr(settings, "ENCRYPTION_KEY", ""),
        max_age=int(getattr(settings, "TOKEN_MAX_AGE", 0)),
    )

    auth_service = AuthService(
        storage,
        token_service,
        kelio_client,
        rate_limiter,
        admin_username=getattr(settings, "ADMIN_USERNAME", ""),
        admin_password=getattr(settings, "ADMIN_PASSWORD", ""),
    )
    timesheet_service = TimesheetService(
        kelio_client,
        storage,
        token_service,
        merger=HourMerger(),
        accountant=TimeAccountant(rules),
        timezone=getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE),
    )

    return Container(
        rules=rules,
        storage=storage,
        rate_limiter=rate_limiter,
        kelio_client=kelio_client,
        token_service=token_service,
        auth_service=auth_service,
        timesheet_service=timesheet_service,
        asset_service=AssetService(),
    )
