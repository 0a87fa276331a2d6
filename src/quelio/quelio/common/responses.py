from __future__ import annotations

from typing import Any

from flask import Response, jsonify

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=()",
}


def json_success(data: dict[str, Any], status: int = 200) -> tuple[Response, int]:
    return jsonify(data), status


def json_error(message: str, status: int = 400, **extra: Any) -> tuple[Response, int]:
    payload = {"error": message}
    payload.update(extra)
    return jsonify(payload), status


def add_security_headers(response: Response) -> Response:
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response
