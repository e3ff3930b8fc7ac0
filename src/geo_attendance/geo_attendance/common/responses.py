from __future__ import annotations

import logging
from typing import Any

from flask import jsonify, request

from ..core.exceptions import (
    AuthRequired,
    BiometricDeclined,
    BiometricFailed,
    DomainError,
    GuestLimitExceeded,
    LocationUnauthorized,
    LocationUnavailable,
    NotFoundError,
    OutsideOfficeArea,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (BiometricDeclined, 200),
    (OutsideOfficeArea, 200),
    (ValidationError, 400),
    (AuthRequired, 401),
    (BiometricFailed, 401),
    (GuestLimitExceeded, 403),
    (LocationUnauthorized, 403),
    (NotFoundError, 404),
    (LocationUnavailable, 422),
    (PersistenceError, 503),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def ok(**payload: Any):
    return jsonify({"success": True, "message": None, **payload}), 200


def fail(error: DomainError):
    return jsonify({"success": False, "message": error.message, "error": type(error).__name__}), status_for(error)


def server_error():
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"success": False, "message": "Internal server error"}), 500
