"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Any, TypeVar, cast

from flask import Flask, Response, current_app, g, jsonify, request

from travel_api.core.errors import Unauthorized
from travel_api.infra.jwt.token_signer import JWTTokenSigner
from travel_api.infra.security.password_hasher import WerkzeugPasswordHasher
from travel_api.services._shared.ports.clock import SystemClock
from travel_api.services._shared.ports.identifiers import UrlSafeTokenGenerator, UUIDGenerator
from travel_api.services.auth.dto import AuthTokenConfig
from travel_api.services.auth.service import AuthService
from travel_api.uow.sqlalchemy_uow import SQLAlchemyTransactionRunner

F = TypeVar("F", bound=Callable[..., Any])

AUTH_SERVICE_KEY = "auth_service"


def build_auth_service(app: Flask) -> AuthService:
    """Wire an :class:`AuthService` from application configuration.

    Every setting is passed explicitly; the service never reads ``app.config``.
    """

    cfg = app.config
    clock = SystemClock()
    return AuthService(
        runner=SQLAlchemyTransactionRunner(),
        signer=JWTTokenSigner(
            secret=cfg["JWT_SECRET_KEY"],
            algorithm=cfg.get("JWT_ALGORITHM", "HS256"),
            issuer=cfg.get("JWT_ISSUER", "travel-api"),
            audience=cfg.get("JWT_AUDIENCE", "travel-api"),
            clock=clock,
        ),
        hasher=WerkzeugPasswordHasher(method=cfg.get("PASSWORD_HASH_METHOD", "scrypt")),
        clock=clock,
        user_ids=UUIDGenerator(),
        token_ids=UrlSafeTokenGenerator(int(cfg.get("REFRESH_TOKEN_BYTES", 32))),
        token_cfg=AuthTokenConfig(
            access_expires=timedelta(seconds=int(cfg["ACCESS_TOKEN_TTL_SECONDS"])),
            refresh_expires=timedelta(seconds=int(cfg["REFRESH_TOKEN_TTL_SECONDS"])),
        ),
    )


def get_auth_service() -> AuthService:
    """Return the application-wide :class:`AuthService`, building it once.

    Tests may pre-seed ``app.extensions["auth_service"]`` with their own wiring.
    """

    service = current_app.extensions.get(AUTH_SERVICE_KEY)
    if service is None:
        app = cast(Flask, current_app._get_current_object())  # type: ignore[attr-defined]
        service = build_auth_service(app)
        current_app.extensions[AUTH_SERVICE_KEY] = service
    return cast(AuthService, service)


def get_bearer_token() -> str | None:
    """Extract the token of an ``Authorization: Bearer <token>`` header."""

    header = request.headers.get("Authorization", "")
    parts = header.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token.

    The authenticated user id is stored in ``g.user_id``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = get_bearer_token()
        if not token:
            raise Unauthorized("Missing bearer token")
        g.user_id = get_auth_service().authenticate(token)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
