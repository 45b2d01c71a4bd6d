from __future__ import annotations

from dataclasses import asdict

from flask import Flask, request

from ..common.datetime_utils import current_month_iso
from ..common.web import api_endpoint, ok
from ..container import Container
from ..core.constants import DEFAULT_CATEGORY


def register(app: Flask, container: Container) -> None:
    service = container.analytics_service

    def _range() -> dict:
        return {
            "category": request.args.get("category"),
            "start": request.args.get("start"),
            "end": request.args.get("end"),
        }

    @app.route("/api/analytics/dashboard", methods=["GET"], endpoint="analytics_dashboard")
    @api_endpoint
    def dashboard():
        category = request.args.get("category") or DEFAULT_CATEGORY
        month = request.args.get("month") or current_month_iso()
        return ok(dashboard=service.dashboard(category, month))

    @app.route("/api/analytics/processes", methods=["GET"], endpoint="analytics_processes")
    @api_endpoint
    def processes():
        return ok(metrics=service.process_metrics(**_range()), trend=service.daily_trend(**_range()))

    @app.route("/api/analytics/monthly", methods=["GET"], endpoint="analytics_monthly")
    @api_endpoint
    def monthly():
        filters = {**_range(), "process": request.args.get("process")}
        return ok(months=service.monthly_summary(**filters), topProducts=service.top_products(**filters))

    @app.route("/api/analytics/stats", methods=["GET"], endpoint="analytics_stats")
    @api_endpoint
    def stats():
        return ok(stats=asdict(service.stats()))
