from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import today_iso
from ..common.web import api_endpoint, json_body, ok, require_session
from ..container import Container
from ..storage.codec import encode

# JSON field -> ProductionService.edit_entry keyword
_EDITABLE = {
    "date": "date",
    "category": "category",
    "process": "process",
    "productName": "product_name",
    "unit": "unit",
    "planQuantity": "plan_quantity",
    "actualQuantity": "actual_quantity",
    "batchNo": "batch_no",
    "manpower": "manpower",
    "remark": "remark",
}


def register(app: Flask, container: Container) -> None:
    service = container.production_service

    @app.route("/api/production", methods=["GET"], endpoint="list_production")
    @api_endpoint
    def list_production():
        actor = require_session(container)
        args = request.args
        entries = service.list_entries(
            actor,
            date=args.get("date"),
            category=args.get("category"),
            process=args.get("process"),
            start=args.get("start"),
            end=args.get("end"),
        )
        return ok(entries=[encode(e) for e in entries])

    @app.route("/api/production/batch-no", methods=["GET"], endpoint="generate_batch_no")
    @api_endpoint
    def generate_batch_no():
        require_session(container)
        return ok(batchNo=service.generate_batch_no(request.args.get("date") or today_iso()))

    @app.route("/api/production/plans", methods=["POST"], endpoint="create_plan")
    @api_endpoint
    def create_plan():
        actor = require_session(container)
        body = json_body()
        entry = service.create_plan(
            actor,
            date=body.get("date", ""),
            category=body.get("category", ""),
            process=body.get("process", ""),
            product_name=body.get("productName", ""),
            plan_quantity=body.get("planQuantity"),
            unit=body.get("unit", "KG"),
            remark=body.get("remark", ""),
        )
        return ok(201, entry=encode(entry))

    @app.route("/api/production/<entry_id>/actual", methods=["POST"], endpoint="record_actual")
    @api_endpoint
    def record_actual(entry_id: str):
        actor = require_session(container)
        body = json_body()
        entry = service.record_actual(
            actor,
            entry_id,
            actual_quantity=body.get("actualQuantity"),
            batch_no=body.get("batchNo", ""),
            manpower=body.get("manpower", 0),
            remark=body.get("remark", ""),
        )
        return ok(entry=encode(entry))

    @app.route("/api/production/<entry_id>", methods=["PUT"], endpoint="edit_entry")
    @api_endpoint
    def edit_entry(entry_id: str):
        actor = require_session(container)
        body = json_body()
        fields = {kw: body[key] for key, kw in _EDITABLE.items() if key in body}
        entry = service.edit_entry(actor, entry_id, **fields)
        return ok(entry=encode(entry))

    @app.route("/api/production/<entry_id>", methods=["DELETE"], endpoint="delete_entry")
    @api_endpoint
    def delete_entry(entry_id: str):
        actor = require_session(container)
        result = service.delete_entry(actor, entry_id)
        return ok(
            deleted=encode(result.deleted) if result.deleted else None,
            remoteOk=result.remote_ok,
            count=len(result.entries),
        )
