from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    PermissionDeniedError,
    TransientError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (AuthorizationError, 403),
    (PermissionDeniedError, 403),
    (TransientError, 503),
)


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def domain_error_response(e: DomainError):
    for exc_type, status in _STATUS:
        if isinstance(e, exc_type):
            return fail(str(e), status)
    logger.error("Unmapped domain error: %r", e)
    return fail("Internal error", 500)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please sign in to continue", 401)
        if session.get("role") != Role.ADMIN.value:
            return fail("Administrator access required", 403)
        return view(*args, **kwargs)

    return wrapper


def current_role() -> Role:
    try:
        return Role(session.get("role"))
    except ValueError:
        raise AuthorizationError("Unknown role") from None
