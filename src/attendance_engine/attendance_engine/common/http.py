from __future__ import annotations

import logging
from datetime import date, datetime, time
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DependencyFailure,
    DomainError,
    NotFoundError,
    PolicyRejection,
    StateConflict,
    ValidationError,
)
from .actor import Actor

logger = logging.getLogger(__name__)


def _session_actor() -> Optional[Actor]:
    """Actor from the session, or None when the session is missing or malformed."""
    try:
        employee_id = int(session["employee_id"])
        role = Role(session["role"])
    except (KeyError, TypeError, ValueError):
        return None
    if employee_id <= 0:
        return None
    return Actor(employee_id=employee_id, role=role)


def current_actor() -> Actor:
    actor = _session_actor()
    if actor is None:
        raise AuthorizationError("Unauthorized")
    return actor


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if _session_actor() is None:
            return jsonify({"success": False, "error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = _session_actor()
        if actor is None:
            return jsonify({"success": False, "error": "Unauthorized"}), 401
        if not actor.is_admin:
            return jsonify({"success": False, "error": "Forbidden - Admin access required"}), 403
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def status_code_for(exc: DomainError) -> int:
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, StateConflict):
        return 409
    if isinstance(exc, PolicyRejection):
        return 422
    if isinstance(exc, DependencyFailure):
        return 503
    return 400


def error_response(exc: Exception):
    if isinstance(exc, DomainError):
        code = status_code_for(exc)
        if code >= 500:
            logger.warning("dependency failure on %s %s: %s", request.method, request.path, exc)
        return jsonify({"success": False, "error": str(exc), "kind": type(exc).__name__}), code

    logger.exception("unhandled error on %s %s", request.method, request.path)
    return jsonify({"success": False, "error": "Internal server error"}), 500


def to_jsonable(value: Any) -> Any:
    """Turn dataclass trees (dates, enums, nested records) into JSON-friendly data."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if hasattr(value, "__dataclass_fields__"):
        return {name: to_jsonable(getattr(value, name)) for name in value.__dataclass_fields__}
    return value
