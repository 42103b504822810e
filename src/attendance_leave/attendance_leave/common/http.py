"""JSON envelope, session identity and error translation for the Flask layer.

Every response has the shape ``{"success": bool, "data"?, "message"?, "error"?}``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import wraps
from typing import Any, Callable, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..approvals.authority import Actor
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InsufficientBalanceError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ValidationError, 400),
    (ConflictError, 400),
    (InsufficientBalanceError, 400),
    (InvalidTransitionError, 400),
)


def plain(value: Any) -> Any:
    """Convert dates, decimals and enums into JSON-friendly values."""

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [plain(v) for v in value]
    return value


def ok(data: Any = None, message: Optional[str] = None, status: int = 200):
    body: dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = plain(data)
    if message:
        body["message"] = message
    return jsonify(body), status


def fail(message: str, *, error: str, status: int):
    return jsonify({"success": False, "message": message, "error": error}), status


def status_for(exc: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 400


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def required_int(value: Any, field_name: str) -> int:
    out = optional_int(value, field_name)
    if out is None:
        raise ValidationError(f"{field_name} is required")
    return out


def current_actor() -> Actor:
    user_id = session.get("user_id")
    role = session.get("role")
    if user_id is None or role is None:
        raise AuthenticationError("Authentication required")
    return Actor(user_id=int(user_id), role=Role(role))


def login_required(view: Callable) -> Callable:
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_actor()
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role) -> Callable[[Callable], Callable]:
    allowed = set(roles)

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            if current_actor().role not in allowed:
                raise AuthorizationError("You do not have permission to access this resource")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        logger.warning(
            "%s %s failed: %s", request.method, request.path, exc,
            extra={"error_code": exc.code, "status": status},
        )
        return fail(str(exc), error=exc.code, status=status)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return fail(exc.description or exc.name, error=exc.name.upper().replace(" ", "_"), status=exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail("An unexpected error occurred", error="UNEXPECTED", status=500)
