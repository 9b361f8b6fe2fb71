from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import month_range, now_local
from ..common.serialization import to_json, to_json_list
from ..common.web import current_identity, make_guards, parse_date_field, parse_int_field
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    login_required, _ = make_guards(container)

    def _requested_range():
        if request.args.get("start") or request.args.get("end"):
            start = parse_date_field(request.args.get("start"), "Start date")
            end = parse_date_field(request.args.get("end"), "End date")
            return start, end

        today = now_local().date()
        year = parse_int_field(request.args.get("year"), "Year", required=False) or today.year
        month = parse_int_field(request.args.get("month"), "Month", required=False) or today.month
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")
        return month_range(year, month)

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="check_in")
    @login_required
    def check_in():
        session = container.attendance_service.check_in(current_identity().employee_id)
        return jsonify(session=to_json(session)), 201

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="check_out")
    @login_required
    def check_out():
        session = container.attendance_service.check_out(current_identity().employee_id)
        return jsonify(session=to_json(session))

    @app.route("/api/attendance/today", endpoint="attendance_today")
    @login_required
    def attendance_today():
        session = container.attendance_service.get_today(current_identity().employee_id)
        return jsonify(session=to_json(session) if session else None)

    @app.route("/api/attendance", endpoint="list_attendance")
    @login_required
    def list_attendance():
        identity = current_identity()
        start, end = _requested_range()

        # Non-admin callers only ever see their own sessions.
        if identity.is_admin:
            employee_id = parse_int_field(request.args.get("employee_id"), "Employee", required=False)
        else:
            employee_id = identity.employee_id

        sessions = container.attendance_service.list_sessions(employee_id, start=start, end=end)
        summary = container.attendance_service.summarize(sessions)
        return jsonify(
            start=start.isoformat(),
            end=end.isoformat(),
            sessions=to_json_list(sessions),
            summary=to_json(summary),
        )
