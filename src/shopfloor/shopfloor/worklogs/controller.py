from __future__ import annotations

from datetime import timedelta

from flask import Flask

from ..common.datetime_utils import dates_window
from ..common.http import current_user_id, date_arg, json_body, json_endpoint, login_required, ok, require_int
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    ledger = container.work_session_ledger

    def _work_log_id() -> int:
        data = json_body()
        if data.get("work_log_id") is None:
            raise ValidationError("work_log_id is required")
        return require_int(data["work_log_id"], "work_log_id")

    @app.route("/api/worklogs/start", methods=["POST"], endpoint="worklogs_start")
    @login_required
    @json_endpoint
    def start():
        data = json_body()
        if data.get("task_id") is None:
            raise ValidationError("task_id is required")
        log = ledger.start_session(user_id=current_user_id(), task_id=require_int(data["task_id"], "task_id"))
        return ok(log.to_dict())

    @app.route("/api/worklogs/pause/start", methods=["POST"], endpoint="worklogs_pause")
    @login_required
    @json_endpoint
    def pause():
        return ok(ledger.pause_session(work_log_id=_work_log_id(), user_id=current_user_id()).to_dict())

    @app.route("/api/worklogs/pause/end", methods=["POST"], endpoint="worklogs_resume")
    @login_required
    @json_endpoint
    def resume():
        return ok(ledger.resume_session(work_log_id=_work_log_id(), user_id=current_user_id()).to_dict())

    @app.route("/api/worklogs/end", methods=["POST"], endpoint="worklogs_end")
    @login_required
    @json_endpoint
    def end():
        data = json_body()
        if data.get("quantity_produced") is None or data.get("defect_quantity") is None:
            raise ValidationError("quantity_produced and defect_quantity are required")
        log = ledger.end_session(
            work_log_id=_work_log_id(),
            quantity_produced=require_int(data["quantity_produced"], "quantity_produced"),
            defect_quantity=require_int(data["defect_quantity"], "defect_quantity"),
            user_id=current_user_id(),
        )
        return ok(log.to_dict())

    @app.route("/api/worklogs/active", methods=["GET"], endpoint="worklogs_active")
    @login_required
    @json_endpoint
    def active():
        log = ledger.get_open_session(current_user_id())
        return ok(log.to_dict() if log else None)

    @app.route("/api/worklogs/task/<int:task_id>", methods=["GET"], endpoint="worklogs_by_task")
    @login_required
    @json_endpoint
    def by_task(task_id: int):
        return ok([log.to_dict() for log in ledger.list_sessions_for_task(task_id)])

    @app.route("/api/worklogs/user/<int:user_id>", methods=["GET"], endpoint="worklogs_by_user")
    @login_required
    @json_endpoint
    def by_user(user_id: int):
        today = container.clock().date()
        start = date_arg("start", today - timedelta(days=7))
        end = date_arg("end", today)
        window_start, window_end = dates_window(start, end)
        logs = ledger.list_sessions_for_actor(user_id=user_id, start=window_start, end=window_end)
        return ok([log.to_dict() for log in logs])
