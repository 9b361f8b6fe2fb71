from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..common.serialization import to_json, to_json_list
from ..common.validators import require_enum
from ..common.web import current_identity, json_body, make_guards, parse_date_field, parse_int_field
from ..container import Container
from ..core.enums import LeaveStatus


def register(app: Flask, container: Container) -> None:
    login_required, admin_required = make_guards(container)

    @app.route("/api/leaves", methods=["GET"], endpoint="list_leaves")
    @login_required
    def list_leaves():
        identity = current_identity()
        status = request.args.get("status")
        status = require_enum(LeaveStatus, status, "status") if status else None

        if identity.is_admin:
            employee_id = parse_int_field(request.args.get("employee_id"), "Employee", required=False)
        else:
            employee_id = identity.employee_id

        leaves = container.leave_service.list_requests(employee_id=employee_id, status=status)
        return jsonify(leaves=to_json_list(leaves))

    @app.route("/api/leaves", methods=["POST"], endpoint="submit_leave")
    @login_required
    def submit_leave():
        data = json_body()
        leave = container.leave_service.submit(
            employee_id=current_identity().employee_id,
            category=data.get("category", ""),
            from_date=parse_date_field(data.get("from_date"), "From date"),
            to_date=parse_date_field(data.get("to_date"), "To date"),
            reason=data.get("reason", ""),
        )
        return jsonify(leave=to_json(leave)), 201

    @app.route("/api/leaves/<int:leave_id>/decision", methods=["POST"], endpoint="decide_leave")
    @admin_required
    def decide_leave(leave_id: int):
        data = json_body()
        leave = container.leave_service.decide(
            leave_id,
            approver=current_identity(),
            outcome=data.get("outcome", ""),
            rejection_reason=data.get("rejection_reason"),
        )
        return jsonify(leave=to_json(leave))

    @app.route("/api/leaves/balance", endpoint="leave_balance")
    @login_required
    def leave_balance():
        identity = current_identity()
        year = parse_int_field(request.args.get("year"), "Year", required=False) or now_local().year

        employee_id = identity.employee_id
        if identity.is_admin and request.args.get("employee_id"):
            employee_id = parse_int_field(request.args.get("employee_id"), "Employee")

        balance = container.leave_service.get_balance(employee_id, year)
        if balance is None:
            return jsonify(
                balance=None,
                message="Leave balance not initialized. Please contact HR.",
            )
        return jsonify(balance=to_json(balance))

    @app.route("/api/leaves/anomalies", endpoint="list_balance_anomalies")
    @admin_required
    def list_balance_anomalies():
        anomalies = container.reconciliation_service.list_open()
        return jsonify(anomalies=to_json_list(anomalies))

    @app.route("/api/leaves/anomalies/reconcile", methods=["POST"], endpoint="reconcile_balances")
    @admin_required
    def reconcile_balances():
        report = container.reconciliation_service.reconcile(performed_by=current_identity().employee_id)
        return jsonify(
            resolved=to_json_list(report.resolved),
            still_open=to_json_list(report.still_open),
        )
