# buddylifts/errors.py
from __future__ import annotations

from typing import Any, Dict

from flask import Flask, current_app, jsonify
from werkzeug.exceptions import HTTPException

from .db import db

STATUS_BY_CODE: Dict[str, int] = {
    "BAD_REQUEST": 400,
    "UNAUTHORIZED": 401,
    "FORBIDDEN": 403,
    "NOT_FOUND": 404,
    "CONFLICT": 409,
    "INTERNAL_SERVER_ERROR": 500,
}

CODE_BY_STATUS: Dict[int, str] = {v: k for k, v in STATUS_BY_CODE.items()}


class ApiError(Exception):
    """Fehler an der Mutations-Grenze: Code + Meldung für den Client."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    @property
    def status(self) -> int:
        return STATUS_BY_CODE.get(self.code, 500)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message}}


class BadRequest(ApiError):
    code = "BAD_REQUEST"


class Unauthorized(ApiError):
    code = "UNAUTHORIZED"


class Forbidden(ApiError):
    code = "FORBIDDEN"


class NotFound(ApiError):
    code = "NOT_FOUND"


class Conflict(ApiError):
    code = "CONFLICT"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def _api_error(e: ApiError):
        db.session.rollback()
        current_app.logger.warning("%s: %s", e.code, e.message)
        return jsonify(e.to_dict()), e.status

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        status = e.code or 500
        code = CODE_BY_STATUS.get(status, "BAD_REQUEST")
        body = {"error": {"code": code, "message": e.description or e.name}}
        return jsonify(body), status

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled error: %s", e)
        body = {"error": {"code": "INTERNAL_SERVER_ERROR", "message": "Internal server error"}}
        return jsonify(body), 500
