from __future__ import annotations

from flask import Flask, Response, request, url_for

from ..common.responses import json_success
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/icon.svg", methods=["GET"], endpoint="icon")
    def icon():
        svg = container.asset_service.render_icon(
            primary=request.args.get("primary"),
            secondary=request.args.get("secondary"),
        )
        response = Response(svg, mimetype="image/svg+xml")
        response.headers["Cache-Control"] = "no-cache, must-revalidate"
        return response

    @app.route("/manifest.json", methods=["GET"], endpoint="manifest")
    def manifest():
        data = container.asset_service.build_manifest(
            icon_url=url_for("icon", _external=True),
            start_url=request.script_root + "/",
            primary=request.args.get("primary"),
            secondary=request.args.get("secondary"),
            background=request.args.get("background"),
        )
        return json_success(data)
