from __future__ import annotations

from flask import Flask

from ..common.validators import require_role
from ..common.web import api_endpoint, json_body, ok, require_session
from ..container import Container
from ..core.enums import Role


def register(app: Flask, container: Container) -> None:
    @app.route("/api/sync", methods=["POST"], endpoint="sync_now")
    @api_endpoint
    def sync_now():
        require_session(container)
        report = container.storage.sync_with_remote()
        return ok(
            enabled=report.enabled,
            updated=list(report.updated),
            skipped=list(report.skipped),
            rejected=report.rejected,
        )

    @app.route("/api/settings/remote-url", methods=["GET"], endpoint="get_remote_url")
    @api_endpoint
    def get_remote_url():
        require_role(require_session(container), Role.ADMIN)
        return ok(
            savedUrl=container.storage.get_saved_remote_url(),
            activeUrl=container.bridge.active_url(),
            enabled=container.storage.remote_enabled(),
        )

    @app.route("/api/settings/remote-url", methods=["PUT"], endpoint="set_remote_url")
    @api_endpoint
    def set_remote_url():
        require_role(require_session(container), Role.ADMIN)
        container.storage.set_remote_url(json_body().get("url", ""))
        return ok(activeUrl=container.bridge.active_url(), enabled=container.storage.remote_enabled())
