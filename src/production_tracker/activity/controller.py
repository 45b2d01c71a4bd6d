from __future__ import annotations

from flask import Flask, request

from ..common.web import api_endpoint, ok, require_session
from ..container import Container
from ..core.exceptions import ValidationError
from ..storage.codec import encode


def register(app: Flask, container: Container) -> None:
    @app.route("/api/logs", methods=["GET"], endpoint="list_logs")
    @api_endpoint
    def list_logs():
        require_session(container)
        logs = container.storage.get_logs()

        limit = request.args.get("limit")
        if limit:
            try:
                logs = logs[: max(int(limit), 0)]
            except ValueError:
                raise ValidationError("limit must be a whole number") from None
        return ok(logs=[encode(log) for log in logs])
