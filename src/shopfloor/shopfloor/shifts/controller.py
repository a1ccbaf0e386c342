from __future__ import annotations

from datetime import timedelta

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.http import (
    current_role,
    current_user_id,
    date_arg,
    json_body,
    json_endpoint,
    login_required,
    ok,
    require_int,
)
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    ledger = container.shift_ledger

    @app.route("/api/shifts/scan", methods=["POST"], endpoint="shifts_scan")
    @login_required
    @json_endpoint
    def scan():
        token = (json_body().get("token") or "").strip()
        if not token:
            raise ValidationError("QR token is required")
        result = ledger.scan_token(user_id=current_user_id(), token=token)
        return ok(result.to_dict())

    @app.route("/api/shifts/lunch", methods=["POST"], endpoint="shifts_lunch")
    @login_required
    @json_endpoint
    def lunch():
        action = json_body().get("action")
        if action == "start":
            shift = ledger.start_lunch(current_user_id())
        elif action == "end":
            shift = ledger.end_lunch(current_user_id())
        else:
            raise ValidationError("action must be 'start' or 'end'")
        return ok(shift.to_dict())

    @app.route("/api/shifts/no-lunch", methods=["POST"], endpoint="shifts_no_lunch")
    @login_required
    @json_endpoint
    def no_lunch():
        return ok(ledger.mark_no_lunch(current_user_id()).to_dict())

    @app.route("/api/shifts/current", methods=["GET"], endpoint="shifts_current")
    @login_required
    @json_endpoint
    def current():
        shift = ledger.get_current_shift(current_user_id())
        return ok(shift.to_dict() if shift else None)

    @app.route("/api/shifts", methods=["GET"], endpoint="shifts_list")
    @login_required
    @json_endpoint
    def list_shifts():
        today = container.clock().date()
        start = date_arg("start", today - timedelta(days=7))
        end = date_arg("end", today)
        user_id_s = request.args.get("user_id")
        user_id = require_int(user_id_s, "user_id") if user_id_s else None

        if current_role() != Role.ADMIN:
            if user_id is not None and user_id != current_user_id():
                raise AuthorizationError("You can only view your own shifts")
            user_id = current_user_id()

        shifts = ledger.list_shifts_for_window(start=start, end=end, user_id=user_id)
        return ok([s.to_dict() for s in shifts])

    @app.route("/api/shifts/calendar", methods=["GET"], endpoint="shifts_calendar")
    @login_required
    @json_endpoint
    def calendar():
        today = container.clock().date()
        start = date_arg("start", today.replace(day=1))
        end = date_arg("end", today)
        grouped = ledger.shift_calendar(start=start, end=end)
        return ok({day: [s.to_dict() for s in shifts] for day, shifts in grouped.items()})

    @app.route("/api/shifts", methods=["POST"], endpoint="shifts_plan")
    @login_required
    @json_endpoint
    def plan():
        data = json_body()
        if not data.get("date"):
            raise ValidationError("date is required")

        user_id = current_user_id()
        if data.get("user_id") is not None:
            requested = require_int(data["user_id"], "user_id")
            if requested != user_id and current_role() != Role.ADMIN:
                raise AuthorizationError("You can only plan shifts for yourself")
            user_id = requested

        try:
            work_date = parse_iso_date(str(data["date"])[:10])
            planned_start = parse_iso_datetime(data.get("planned_start"))
        except ValueError:
            raise ValidationError("date/planned_start must be ISO-8601")

        shift = ledger.plan_shift(user_id=user_id, work_date=work_date, planned_start=planned_start)
        return ok(shift.to_dict(), 201)

    @app.route("/api/shifts/<int:shift_id>", methods=["GET"], endpoint="shifts_get")
    @login_required
    @json_endpoint
    def get_shift(shift_id: int):
        shift = ledger.get_shift(shift_id=shift_id, current_user_id=current_user_id(), current_role=current_role())
        return ok(shift.to_dict())

    @app.route("/api/shifts/<int:shift_id>", methods=["DELETE"], endpoint="shifts_cancel")
    @login_required
    @json_endpoint
    def cancel(shift_id: int):
        ledger.cancel_planned_shift(shift_id=shift_id, current_user_id=current_user_id(), current_role=current_role())
        return ok({"id": shift_id})
