from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import Flask, g, jsonify, request

from ..app_logger import get_logger
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from ..employees.identity import FlaskSessionStore, Identity
from .datetime_utils import parse_iso_date

logger = get_logger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (StateConflictError, 409),
)


def make_guards(container):
    """login_required / admin_required decorators bound to a container.

    The resolved caller is available as ``g.identity`` inside the view.
    """

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            identity = container.identity_service.resolve_current_identity(FlaskSessionStore())
            if not identity:
                return jsonify(error="Please sign in to continue"), 401
            g.identity = identity
            return view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        @login_required
        def wrapper(*args, **kwargs):
            if not current_identity().is_admin:
                return jsonify(error="Administrator access required"), 403
            return view(*args, **kwargs)

        return wrapper

    return login_required, admin_required


def current_identity() -> Identity:
    return g.identity


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def parse_date_field(value: Optional[str], field_name: str, *, required: bool = True):
    if not value:
        if required:
            raise ValidationError(f"{field_name} is required")
        return None
    try:
        return parse_iso_date(str(value))
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def parse_int_field(value, field_name: str, *, required: bool = True) -> Optional[int]:
    if value is None or value == "":
        if required:
            raise ValidationError(f"{field_name} is required")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        for error_cls, status in _STATUS_BY_ERROR:
            if isinstance(e, error_cls):
                return jsonify(error=str(e), code=type(e).__name__), status
        return jsonify(error=str(e), code=type(e).__name__), 400

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # HTTP errors raised by Flask itself keep their own status code
        code = getattr(e, "code", None)
        if isinstance(code, int) and 400 <= code < 500:
            return jsonify(error=getattr(e, "description", str(e))), code

        logger.exception("unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return jsonify(error=f"System error: {e}"), 500
        return jsonify(error="System error, please try again"), 500
