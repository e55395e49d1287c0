"""RFC 7807 ``application/problem+json`` responses for every API failure.

Service exceptions are translated here, so the service layer stays free of
HTTP concerns. Server-side failures are answered with a generic detail and
logged with their traceback.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from travel_api.core.logger import ensure_request_id
from travel_api.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    ConsistencyError,
    EmailAlreadyExistsError,
    InfrastructureError,
    InvalidCredentialsError,
    NotFoundError,
    ServiceError,
    TokenExpiredError,
    TokenNotFoundError,
    TokenRevokedError,
    UsernameAlreadyExistsError,
    ValidationFailedError,
)

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

# Stable codes for statuses raised by werkzeug routing/parsing
HTTP_STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    413: "payload_too_large",
    415: "unsupported_media_type",
    429: "too_many_requests",
    500: "internal_server_error",
    503: "service_unavailable",
}

# First match wins, so subclasses come before their bases
SERVICE_ERROR_CODES: tuple[tuple[type[ServiceError], HTTPStatus, str], ...] = (
    (EmailAlreadyExistsError, HTTPStatus.CONFLICT, "email_already_exists"),
    (UsernameAlreadyExistsError, HTTPStatus.CONFLICT, "username_already_exists"),
    (ConflictError, HTTPStatus.CONFLICT, "conflict"),
    (ValidationFailedError, HTTPStatus.UNPROCESSABLE_ENTITY, "validation_error"),
    (InvalidCredentialsError, HTTPStatus.UNAUTHORIZED, "invalid_credentials"),
    (TokenNotFoundError, HTTPStatus.UNAUTHORIZED, "token_not_found"),
    (TokenExpiredError, HTTPStatus.UNAUTHORIZED, "token_expired"),
    (TokenRevokedError, HTTPStatus.UNAUTHORIZED, "token_revoked"),
    (AuthenticationError, HTTPStatus.UNAUTHORIZED, "unauthorized"),
    (NotFoundError, HTTPStatus.NOT_FOUND, "not_found"),
    (ConsistencyError, HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error"),
    (InfrastructureError, HTTPStatus.SERVICE_UNAVAILABLE, "service_unavailable"),
)


def problem(
    status: int,
    code: str,
    detail: str,
    details: dict[str, Any] | None = None,
) -> tuple[Response, int]:
    """
    Build a problem+json response tagged with the request id.

    :param status: HTTP status code.
    :param code: Machine-readable error code (snake_case).
    :param detail: Client-safe, human-readable explanation.
    :param details: Optional structured context (e.g. field errors).
    :returns: ``(response, status)`` pair for a Flask error handler.
    """
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": detail,
        "instance": request.path,
        "code": code,
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    response = jsonify(body)
    response.mimetype = PROBLEM_MIMETYPE
    return response, int(status)


class APIError(Exception):
    """
    Error raised by view code and rendered as a problem response.

    :param message: Client-facing detail.
    :param status_code: HTTP status (``400`` by default).
    :param code: Machine-readable error code.
    :param details: Optional structured context.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}


class Unauthorized(APIError):
    """401 raised by view guards before the service is involved."""

    def __init__(self, message: str = "Unauthorized", code: str = "unauthorized") -> None:
        super().__init__(message, status_code=HTTPStatus.UNAUTHORIZED, code=code)


def from_service_error(exc: ServiceError) -> APIError:
    """
    Translate a service-layer exception into an :class:`APIError`.

    :param exc: Exception raised by a service.
    :returns: Equivalent API error; 5xx errors carry only the status phrase.
    """
    for exc_type, status, code in SERVICE_ERROR_CODES:
        if not isinstance(exc, exc_type):
            continue
        message = status.phrase if status >= 500 else (str(exc) or status.phrase)
        details = None
        if isinstance(exc, ValidationFailedError) and exc.field:
            details = {"field": exc.field}
        return APIError(message, status_code=status, code=code, details=details)
    return APIError(str(exc) or HTTPStatus.BAD_REQUEST.phrase)


def init_app(app: Flask) -> None:
    """Register problem+json handlers on ``app``."""

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        level = logging.ERROR if err.status_code >= 500 else logging.WARNING
        log.log(level, "api.error", extra={"status": err.status_code, "outcome": err.code})
        return problem(err.status_code, err.code, err.message, err.details or None)

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        api_err = from_service_error(err)
        if api_err.status_code >= 500:
            log.error("service.error", extra={"outcome": api_err.code}, exc_info=err)
        else:
            log.info(
                "service.rejected",
                extra={"status": api_err.status_code, "outcome": api_err.code},
            )
        return problem(api_err.status_code, api_err.code, api_err.message, api_err.details or None)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        log.info("request.invalid", extra={"outcome": "validation_error"})
        return problem(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            {"errors": err.messages},
        )

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        code = HTTP_STATUS_CODES.get(status, "error")
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or HTTPStatus(status).phrase).strip()
        log.info("request.http_error", extra={"status": status, "outcome": code})
        return problem(status, code, detail)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Constraint names and SQL stay in the logs
        log.error("db.integrity_error", exc_info=err)
        return problem(HTTPStatus.CONFLICT, "conflict", "Resource conflict")

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error("db.operational_error", exc_info=err)
        return problem(
            HTTPStatus.SERVICE_UNAVAILABLE,
            "service_unavailable",
            "Service temporarily unavailable",
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        log.error("unhandled_exception", exc_info=err)
        return problem(
            HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error", "Unexpected error"
        )


__all__ = ["APIError", "Unauthorized", "from_service_error", "init_app", "problem"]
