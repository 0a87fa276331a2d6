from __future__ import annotations

from functools import wraps
from typing import Any

from flask import Flask, g, request

from ..common.responses import json_success
from ..container import Container


def _payload() -> dict[str, Any]:
    """Query string, then form fields, then a JSON body; later sources win."""
    data: dict[str, Any] = dict(request.args.items())
    data.update(request.form.items())
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        data.update(body)
    return data


def register(app: Flask, container: Container) -> None:
    def auth_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            data = _payload()
            # Passwords are never read from the query string
            password = request.form.get("password")
            if password is None:
                body = request.get_json(silent=True)
                password = body.get("password") if isinstance(body, dict) else None

            g.auth = container.auth_service.authenticate(
                ip=request.remote_addr or "unknown",
                token=data.get("token") or None,
                username=data.get("username"),
                password=password,
            )
            return view(*args, **kwargs)

        return wrapper

    @app.route("/login", methods=["POST"], endpoint="login")
    @auth_required
    def login():
        return json_success(container.timesheet_service.refresh(g.auth))

    @app.route("/preferences", methods=["POST"], endpoint="update_preferences")
    @auth_required
    def update_preferences():
        user_data = container.timesheet_service.update_preferences(g.auth.username, _payload())
        return json_success(user_data)

    @app.route("/data.json", methods=["GET", "POST"], endpoint="data_dump")
    def data_dump():
        data = _payload()
        container.auth_service.check_admin(data.get("username"), data.get("password"))
        return json_success(container.timesheet_service.dump_all())
