from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.serialization import to_json, to_json_list
from ..common.validators import require_enum
from ..common.web import current_identity, json_body, make_guards, parse_date_field, parse_int_field
from ..container import Container
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    login_required, admin_required = make_guards(container)

    def _visible_task(task_id: int):
        identity = current_identity()
        task = container.task_service.get(task_id)
        if not identity.is_admin and identity.employee_id not in (task.assignee_id, task.assigner_id):
            raise AuthorizationError("You do not have access to this task")
        return task

    @app.route("/api/tasks", methods=["GET"], endpoint="list_tasks")
    @login_required
    def list_tasks():
        identity = current_identity()
        status = request.args.get("status")
        status = require_enum(TaskStatus, status, "status") if status else None

        if identity.is_admin:
            assignee_id = parse_int_field(request.args.get("assignee_id"), "Assignee", required=False)
        else:
            assignee_id = identity.employee_id

        tasks = container.task_service.list_tasks(assignee_id=assignee_id, status=status)
        return jsonify(tasks=to_json_list(tasks))

    @app.route("/api/tasks", methods=["POST"], endpoint="create_task")
    @admin_required
    def create_task():
        data = json_body()
        task = container.task_service.create(
            assigner=current_identity(),
            title=data.get("title", ""),
            description=data.get("description"),
            assignee_id=parse_int_field(data.get("assignee_id"), "Assignee"),
            priority=data.get("priority") or TaskPriority.MEDIUM,
            due_date=parse_date_field(data.get("due_date"), "Due date", required=False),
        )
        return jsonify(task=to_json(task)), 201

    @app.route("/api/tasks/<int:task_id>", endpoint="get_task")
    @login_required
    def get_task(task_id: int):
        return jsonify(task=to_json(_visible_task(task_id)))

    @app.route("/api/tasks/<int:task_id>/advance", methods=["POST"], endpoint="advance_task")
    @login_required
    def advance_task(task_id: int):
        data = json_body()
        task = container.task_service.advance(
            task_id,
            actor=current_identity(),
            new_status=data.get("status", ""),
            progress=parse_int_field(data.get("progress"), "Progress", required=False),
        )
        return jsonify(task=to_json(task))

    @app.route("/api/tasks/<int:task_id>/cancel", methods=["POST"], endpoint="cancel_task")
    @admin_required
    def cancel_task(task_id: int):
        task = container.task_service.cancel(task_id, actor=current_identity())
        return jsonify(task=to_json(task))

    @app.route("/api/tasks/<int:task_id>/comments", methods=["GET"], endpoint="list_task_comments")
    @login_required
    def list_task_comments(task_id: int):
        _visible_task(task_id)
        comments = container.task_service.list_comments(task_id)
        return jsonify(comments=to_json_list(comments))

    @app.route("/api/tasks/<int:task_id>/comments", methods=["POST"], endpoint="add_task_comment")
    @login_required
    def add_task_comment(task_id: int):
        comment = container.task_service.comment(
            task_id,
            author=current_identity(),
            text=json_body().get("text", ""),
        )
        return jsonify(comment=to_json(comment)), 201
