from __future__ import annotations

from flask import Flask

from ..common.web import api_endpoint, json_body, ok, require_session
from ..container import Container
from ..storage.codec import encode


def register(app: Flask, container: Container) -> None:
    @app.route("/api/off-days", methods=["GET"], endpoint="list_off_days")
    @api_endpoint
    def list_off_days():
        return ok(offDays=[encode(od) for od in container.off_day_service.list_off_days()])

    @app.route("/api/off-days", methods=["POST"], endpoint="add_off_day")
    @api_endpoint
    def add_off_day():
        actor = require_session(container)
        body = json_body()
        off_day = container.off_day_service.add_off_day(
            actor,
            date=body.get("date", ""),
            description=body.get("description", ""),
        )
        return ok(201, offDay=encode(off_day))

    @app.route("/api/off-days/<off_day_id>", methods=["DELETE"], endpoint="delete_off_day")
    @api_endpoint
    def delete_off_day(off_day_id: str):
        actor = require_session(container)
        removed = container.off_day_service.delete_off_day(actor, off_day_id)
        return ok(deleted=encode(removed))
