from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.serialization import to_json, to_json_list
from ..common.validators import require_enum
from ..common.web import current_identity, json_body, make_guards, parse_date_field, parse_int_field
from ..container import Container
from ..core.enums import EmployeeStatus, Role
from .identity import FlaskSessionStore


def register(app: Flask, container: Container) -> None:
    login_required, admin_required = make_guards(container)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = json_body()
        identity = container.identity_service.authenticate(
            str(data.get("employee_code", "")),
            str(data.get("password", "")),
            session=FlaskSessionStore(),
        )
        return jsonify(identity=to_json(identity), is_admin=identity.is_admin)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        container.identity_service.end_session(FlaskSessionStore())
        return jsonify(message="Signed out")

    @app.route("/api/auth/me", endpoint="me")
    @login_required
    def me():
        identity = current_identity()
        return jsonify(identity=to_json(identity), is_admin=identity.is_admin)

    @app.route("/api/employees", methods=["GET"], endpoint="list_employees")
    @admin_required
    def list_employees():
        status = request.args.get("status")
        status = require_enum(EmployeeStatus, status, "status") if status else None
        employees = container.employee_service.list_employees(status=status)
        return jsonify(employees=to_json_list(employees))

    @app.route("/api/employees", methods=["POST"], endpoint="onboard_employee")
    @admin_required
    def onboard_employee():
        data = json_body()
        employee = container.employee_service.onboard(
            actor=current_identity(),
            full_name=data.get("full_name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=data.get("role") or Role.EMPLOYEE,
            department=data.get("department"),
            position=data.get("position"),
            joining_date=parse_date_field(data.get("joining_date"), "Joining date", required=False),
        )
        return jsonify(employee=to_json(employee)), 201

    @app.route("/api/employees/<int:employee_id>/status", methods=["POST"], endpoint="change_employee_status")
    @admin_required
    def change_employee_status(employee_id: int):
        employee = container.employee_service.change_status(
            actor=current_identity(),
            employee_id=employee_id,
            status=json_body().get("status", ""),
        )
        return jsonify(employee=to_json(employee))

    @app.route("/api/employees/<int:employee_id>/balances", methods=["POST"], endpoint="initialize_balance")
    @admin_required
    def initialize_balance(employee_id: int):
        year = parse_int_field(json_body().get("year"), "Year")
        container.employee_service.initialize_balance(
            actor=current_identity(),
            employee_id=employee_id,
            year=year,
        )
        balance = container.leave_service.get_balance(employee_id, year)
        return jsonify(balance=to_json(balance)), 201
