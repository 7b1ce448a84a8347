"""
Typed request failures and the JSON error envelope.

Every failure leaves the API as ``{"error": "<message>"}`` with the status
carried by the exception class.
"""
from __future__ import annotations

import logging

from flask import Flask, g, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    status_code = 400


class AuthenticationError(ServiceError):
    status_code = 401


class PermissionDenied(ServiceError):
    status_code = 403


class RateLimited(ServiceError):
    status_code = 429


class RecordNotFound(ServiceError):
    # Missing rows are reported as persistence failures, not as 404s.
    status_code = 500


def _rollback_request_session() -> None:
    s = getattr(g, "db_session", None)
    if s is not None:
        s.rollback()


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ServiceError)
    def _service_error(e: ServiceError):
        _rollback_request_session()
        if e.status_code >= 500:
            app.logger.warning("%s (request_id=%s): %s", type(e).__name__, getattr(g, "request_id", None), e.message)
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def _db_error(e: SQLAlchemyError):
        _rollback_request_session()
        app.logger.exception("Database error (request_id=%s)", getattr(g, "request_id", None))
        orig = getattr(e, "orig", None)
        return jsonify({"error": str(orig) if orig is not None else str(e)}), 500

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return jsonify({"error": e.description}), e.code or 500

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        _rollback_request_session()
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return jsonify({"error": str(e)}), 500
