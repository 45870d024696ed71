"""
Error taxonomy shared by every service and translated to HTTP at the edge.

Each error carries an explicit ``ErrorKind``; routes and the error handler
decide status codes from the kind, never from message text.
"""

import enum
import logging
import time

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger("pillgraph.errors")


class ErrorKind(enum.Enum):
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    AI_TIMEOUT = "ai_timeout"
    AI_CONNECTION_ERROR = "ai_connection_error"
    AI_RESPONSE_MALFORMED = "ai_response_malformed"
    AI_SERVICE_ERROR = "ai_service_error"
    INTERNAL = "internal"


# kind -> (HTTP status, default public error code)
_STATUS_BY_KIND = {
    ErrorKind.INVALID_ARGUMENT: (400, "INVALID_PARAMETER"),
    ErrorKind.NOT_FOUND: (404, "NOT_FOUND"),
    ErrorKind.CONFLICT: (409, "CONFLICT"),
    ErrorKind.AI_TIMEOUT: (504, "AI_TIMEOUT"),
    ErrorKind.AI_CONNECTION_ERROR: (502, "AI_CONNECTION_ERROR"),
    ErrorKind.AI_RESPONSE_MALFORMED: (502, "AI_RESPONSE_MALFORMED"),
    ErrorKind.AI_SERVICE_ERROR: (502, "AI_SERVICE_ERROR"),
    ErrorKind.INTERNAL: (500, "INTERNAL_ERROR"),
}


class ServiceError(Exception):
    """Base class for every error a service may raise."""

    kind: ErrorKind = ErrorKind.INTERNAL
    code: str = ""

    def __init__(self, message: str, code: str = ""):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    @property
    def status(self) -> int:
        return _STATUS_BY_KIND[self.kind][0]

    @property
    def error_code(self) -> str:
        return self.code or _STATUS_BY_KIND[self.kind][1]

    @property
    def is_ai_error(self) -> bool:
        return self.kind in AI_ERROR_KINDS


class InvalidArgument(ServiceError):
    kind = ErrorKind.INVALID_ARGUMENT


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND


class DrugNotFound(NotFound):
    code = "DRUG_NOT_FOUND"


class InteractionNotFound(NotFound):
    code = "INTERACTION_NOT_FOUND"


class Conflict(ServiceError):
    kind = ErrorKind.CONFLICT


class AITimeout(ServiceError):
    kind = ErrorKind.AI_TIMEOUT


class AIConnectionError(ServiceError):
    kind = ErrorKind.AI_CONNECTION_ERROR


class AIResponseMalformed(ServiceError):
    kind = ErrorKind.AI_RESPONSE_MALFORMED


class AIServiceError(ServiceError):
    kind = ErrorKind.AI_SERVICE_ERROR


class Internal(ServiceError):
    kind = ErrorKind.INTERNAL


AI_ERROR_KINDS = frozenset({
    ErrorKind.AI_TIMEOUT,
    ErrorKind.AI_CONNECTION_ERROR,
    ErrorKind.AI_RESPONSE_MALFORMED,
    ErrorKind.AI_SERVICE_ERROR,
})


def now_ms() -> int:
    return int(time.time() * 1000)


def success_response(data, status: int = 200, **extra):
    """Standard success envelope: ``{success, data, timestamp}``."""
    body = {"success": True, "data": data}
    body.update(extra)
    body["timestamp"] = now_ms()
    return jsonify(body), status


def error_response(code: str, message: str, status: int):
    return jsonify({
        "success": False,
        "error": {"code": code, "message": message},
        "timestamp": now_ms(),
    }), status


def register_error_handlers(app) -> None:
    """Translate service errors (and stray exceptions) into the JSON envelope."""

    @app.errorhandler(ServiceError)
    def _handle_service_error(exc: ServiceError):
        if exc.is_ai_error:
            logger.warning("Upstream AI failure [%s]: %s", exc.error_code, exc.message)
        elif exc.status >= 500:
            logger.error("Request failed [%s]: %s", exc.error_code, exc.message)
        return error_response(exc.error_code, exc.message, exc.status)

    @app.errorhandler(HTTPException)
    def _handle_http_error(exc: HTTPException):
        code = (exc.name or "HTTP_ERROR").upper().replace(" ", "_")
        return error_response(code, exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return error_response("INTERNAL_ERROR", "Internal server error.", 500)
