"""Helpers shared by the JSON controllers: session identity, errors, argument parsing."""

from __future__ import annotations

import logging
from datetime import date, datetime
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DataIntegrityError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_iso_date, parse_iso_datetime

logger = logging.getLogger(__name__)

_ERROR_STATUS = (
    (ValidationError, 400, "invalid_input"),
    (AuthorizationError, 403, "forbidden"),
    (NotFoundError, 404, "not_found"),
    (ConflictError, 409, "conflict"),
    (InvalidStateError, 422, "invalid_state"),
    (DataIntegrityError, 500, "data_integrity"),
)


def error_response(err: DomainError):
    for exc_type, status, kind in _ERROR_STATUS:
        if isinstance(err, exc_type):
            return jsonify({"success": False, "error": kind, "message": str(err)}), status
    return jsonify({"success": False, "error": "domain_error", "message": str(err)}), 400


def ok(data: Any, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def json_endpoint(view):
    """Translate domain errors to JSON responses; log anything unexpected."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            logger.debug("%s rejected: %s", view.__name__, e)
            return error_response(e)
        except Exception:
            logger.exception("unhandled error in %s", view.__name__)
            return jsonify({"success": False, "error": "internal", "message": "Internal server error"}), 500

    return wrapper


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "unauthorized", "message": "Login required"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "error": "unauthorized", "message": "Login required"}), 401
        if session.get("role") != Role.ADMIN.value:
            return jsonify({"success": False, "error": "forbidden", "message": "Admins only"}), 403
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Role:
    try:
        return Role(session.get("role") or Role.EMPLOYEE.value)
    except ValueError:
        return Role.EMPLOYEE


def json_body() -> dict:
    return request.get_json(silent=True) or {}


def require_int(value: Any, field_name: str) -> int:
    """Accept ints, integral floats and integer strings; never truncate."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field_name} must be an integer")
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def date_arg(name: str, default: Optional[date] = None) -> Optional[date]:
    raw = request.args.get(name)
    if not raw:
        return default
    try:
        return parse_iso_date(raw[:10])
    except ValueError:
        raise ValidationError(f"{name} must be YYYY-MM-DD")


def datetime_arg(name: str, default: Optional[datetime] = None) -> Optional[datetime]:
    raw = request.args.get(name)
    if not raw:
        return default
    try:
        return parse_iso_datetime(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an ISO-8601 timestamp")
