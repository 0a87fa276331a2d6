from __future__ import annotations

import importlib
import logging
import math
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .common.responses import add_security_headers, json_error
from .container import Container, build_container
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    PortalError,
    RateLimitedError,
    StorageError,
    ValidationError,
)
from .assets.controller import register as register_assets
from .timesheet.controller import register as register_timesheet

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.sort_keys = False

    logging.basicConfig(level=logging.DEBUG if app.config["DEBUG"] else logging.INFO, format=LOG_FORMAT)
    logger.info("Starting with settings=%s portal=%s", settings_module, getattr(settings, "KELIO_URL", ""))

    container = container or build_container(settings=settings)

    app.after_request(add_security_headers)
    _register_error_handlers(app)

    register_timesheet(app, container)
    register_assets(app, container)

    return app


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def validation_error(e: ValidationError):
        if e.fields:
            return json_error(str(e), 422, fields=e.fields)
        return json_error(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def authentication_error(e: AuthenticationError):
        if e.token_invalidated:
            return json_error(str(e), 401, token_invalidated=True)
        return json_error(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def authorization_error(e: AuthorizationError):
        return json_error(str(e), 401)

    @app.errorhandler(RateLimitedError)
    def rate_limited(e: RateLimitedError):
        response, status = json_error(
            str(e),
            429,
            retry_after=e.retry_after,
            retry_after_minutes=math.ceil(e.retry_after / 60),
        )
        response.headers["Retry-After"] = str(e.retry_after)
        return response, status

    @app.errorhandler(PortalError)
    def portal_error(e: PortalError):
        return json_error(str(e), 502)

    @app.errorhandler(StorageError)
    def storage_error(e: StorageError):
        return json_error(str(e), 500)

    @app.errorhandler(DomainError)
    def domain_error(e: DomainError):
        logger.error("Unhandled domain error: %s", e)
        return json_error(str(e), 500)

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return json_error(e.description or e.name, e.code or 500)
