from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Conflicts are reported as 400, which is what the mobile client expects
# for "Time slot is already booked" and "already processed".
STATUS_BY_ERROR = {
    ValidationError: 400,
    ConflictError: 400,
    AuthenticationError: 401,
    ForbiddenError: 403,
    NotFoundError: 404,
}


def error_body(message: str, category: str):
    return jsonify({"error": message, "category": category})


def register(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = next((code for cls, code in STATUS_BY_ERROR.items() if isinstance(e, cls)), 400)
        return error_body(str(e), e.category), status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return error_body(e.description or e.name, e.name.upper().replace(" ", "_")), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error: %s", e)
        return error_body("Internal server error", "INTERNAL"), 500
