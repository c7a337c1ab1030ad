"""
Problem Details (RFC 7807) responses for every error the API can raise.

Service-layer errors are translated here; nothing below ``accounts.api``
knows about HTTP status codes.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from accounts.core.logger import ensure_request_id
from accounts.services._shared.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
    ValidationError,
)

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Stable machine-readable codes for statuses raised outside the service layer
STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    415: "unsupported_media_type",
    422: "validation_error",
    500: "internal_server_error",
    503: "service_unavailable",
}


def problem(
    status: int,
    message: str,
    *,
    code: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build a problem document for the current request.

    :param status: HTTP status code.
    :param message: Client-safe explanation, emitted as ``detail``.
    :param code: Machine-readable code; derived from ``status`` when omitted.
    :param details: Optional structured payload (e.g. field errors).
    :returns: JSON-serialisable dictionary.
    """
    status = int(status)
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path,
        "code": code or STATUS_CODES.get(status, "error"),
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def problem_response(body: dict[str, Any]) -> tuple[Response, int]:
    """Serialise ``body`` with the problem+json media type."""
    resp = jsonify(body)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, int(body["status"])


class APIError(Exception):
    """
    Error raised directly by API-layer code (guards, request parsing).

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier; derived from the status when omitted.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    """

    status_code: int = HTTPStatus.BAD_REQUEST

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = int(status_code)
        self.code = code or STATUS_CODES.get(int(self.status_code), "error")
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        return problem(int(self.status_code), self.message, code=self.code, details=self.details)


class Unauthorized(APIError):
    status_code = HTTPStatus.UNAUTHORIZED


# Most specific first: the first ``isinstance`` match wins
_SERVICE_ERRORS: tuple[tuple[type[ServiceError], int, str], ...] = (
    (NotFoundError, HTTPStatus.NOT_FOUND, "not_found"),
    (ConflictError, HTTPStatus.CONFLICT, "conflict"),
    (UnauthorizedError, HTTPStatus.UNAUTHORIZED, "unauthorized"),
    (InternalError, HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error"),
    (ValidationError, HTTPStatus.BAD_REQUEST, "validation_error"),
)


def translate_service_error(exc: ServiceError) -> APIError:
    """
    Map a service-layer error onto its HTTP counterpart.

    Unknown :class:`ServiceError` subclasses become a plain ``400``.
    """
    for error_type, status, code in _SERVICE_ERRORS:
        if isinstance(exc, error_type):
            return APIError(str(exc), status_code=status, code=code)
    return APIError(str(exc), status_code=HTTPStatus.BAD_REQUEST, code="bad_request")


def _log(body: dict[str, Any], source: str, *, exc_info: bool = False) -> None:
    status = int(body["status"])
    level = logging.ERROR if status >= 500 else logging.WARNING
    log.log(
        level,
        "%s: code=%s status=%s detail=%s request_id=%s",
        source,
        body["code"],
        status,
        body["detail"],
        body["request_id"],
        exc_info=exc_info,
    )


def init_app(app: Flask) -> None:
    """
    Register the error handlers.

    4xx are logged as warnings, 5xx as errors with the traceback. Database
    and unexpected errors never leak their internal message.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        body = err.to_problem()
        _log(body, "APIError", exc_info=int(err.status_code) >= 500)
        return problem_response(body)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        api_error = translate_service_error(err)
        body = api_error.to_problem()
        _log(body, type(err).__name__, exc_info=int(api_error.status_code) >= 500)
        return problem_response(body)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        else:
            message = (err.description or HTTPStatus(status).phrase).strip()
        body = problem(status, message)
        _log(body, "HTTPException")
        return problem_response(body)

    @app.errorhandler(MarshmallowValidationError)
    def handle_schema_error(err: MarshmallowValidationError):
        body = problem(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "Validation failed",
            details={"errors": err.messages},
        )
        _log(body, "SchemaValidation")
        return problem_response(body)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        body = problem(HTTPStatus.CONFLICT, "Resource conflict")
        _log(body, "IntegrityError", exc_info=True)
        return problem_response(body)

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        body = problem(HTTPStatus.SERVICE_UNAVAILABLE, "Service temporarily unavailable")
        _log(body, "OperationalError", exc_info=True)
        return problem_response(body)

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        body = problem(HTTPStatus.INTERNAL_SERVER_ERROR, "Unexpected error")
        _log(body, "Unhandled", exc_info=True)
        return problem_response(body)


__all__ = [
    "APIError",
    "Unauthorized",
    "init_app",
    "problem",
    "translate_service_error",
]
