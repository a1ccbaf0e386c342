from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import dates_window
from ..common.http import admin_required, date_arg, json_endpoint, login_required, ok, require_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    aggregator = container.efficiency_aggregator

    def _window():
        today = container.clock().date()
        return dates_window(date_arg("start", today.replace(day=1)), date_arg("end", today))

    @app.route("/api/analytics/efficiency/<int:user_id>", methods=["GET"], endpoint="analytics_efficiency")
    @login_required
    @json_endpoint
    def efficiency(user_id: int):
        window_start, window_end = _window()
        snapshot = aggregator.actor_efficiency(user_id=user_id, window_start=window_start, window_end=window_end)
        return ok(snapshot.to_dict())

    @app.route("/api/analytics/employees", methods=["GET"], endpoint="analytics_employees")
    @admin_required
    @json_endpoint
    def employees():
        window_start, window_end = _window()
        raw = request.args.get("user_ids")
        user_ids = [require_int(v, "user_ids") for v in raw.split(",") if v.strip()] if raw else None
        ranking = aggregator.employees_efficiency(window_start=window_start, window_end=window_end, user_ids=user_ids)
        return ok([s.to_dict() for s in ranking])

    @app.route("/api/analytics/tasks/<int:task_id>/contribution", methods=["GET"], endpoint="analytics_contribution")
    @login_required
    @json_endpoint
    def contribution(task_id: int):
        return ok(aggregator.task_contribution(task_id).to_dict())

    @app.route("/api/analytics/production", methods=["GET"], endpoint="analytics_production")
    @admin_required
    @json_endpoint
    def production():
        stats = aggregator.production_statistics(start_date=date_arg("start"), end_date=date_arg("end"))
        return ok(stats.to_dict())
