"""Structured JSON logging with request correlation and credential redaction."""

from __future__ import annotations

import json
import logging
import re
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = ("X-Request-ID", "X-Correlation-ID")

# Structured ``extra`` keys copied onto the JSON payload when present
EXTRA_KEYS = (
    "endpoint",
    "method",
    "path",
    "status",
    "elapsed_ms",
    "user_id",
    "outcome",
    "revoked_count",
)

_BEARER_RE = re.compile(r"(?i)(bearer\s+)[^\s,;]+")
_JWT_RE = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]*")
REDACTED = "***"


def redact(text: str) -> str:
    """Mask bearer credentials and JWT-shaped strings in ``text``."""
    text = _BEARER_RE.sub(lambda m: m.group(1) + REDACTED, text)
    return _JWT_RE.sub(REDACTED, text)


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects.

    :param service: Value of the ``service`` field on every line.
    """

    def __init__(self, service: str = "travel-api") -> None:
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "service": self.service,
            "name": record.name,
            "message": redact(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }
        if record.exc_info:
            payload["exc_info"] = redact(self.formatException(record.exc_info))
        for key in EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Ensure a ``request_id`` attribute is always present on log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """Return the current request identifier, generating one when necessary.

    Inside a request the value comes from ``X-Request-ID`` or
    ``X-Correlation-ID`` when the client sent one and is cached on ``g``.
    """

    if not has_request_context():
        return str(uuid4())
    if hasattr(g, "request_id"):
        return g.request_id  # type: ignore[return-value]
    incoming = next(
        (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None
    )
    g.request_id = incoming or str(uuid4())
    return g.request_id  # type: ignore[return-value]


def configure_logging(level: str | int = "INFO", *, service: str = "travel-api") -> None:
    """Install a JSON stdout handler on the root logger.

    :param level: Level name or number for the root logger.
    :param service: Service name stamped on every line.
    """

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(service))
    handler.addFilter(RequestIdFilter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """Correlate requests and emit one ``request.completed`` line per request."""

    app.logger.addFilter(RequestIdFilter())
    access_log = logging.getLogger("travel_api.access")

    @app.before_request
    def _start_request() -> None:
        ensure_request_id()
        g.request_started = time.perf_counter()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = g.pop("request_started", None)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2) if started else None
        access_log.info(
            "request.completed",
            extra={
                "method": request.method,
                "path": request.path,
                "status": response.status_code,
                "elapsed_ms": elapsed_ms,
            },
        )
        return response


__all__ = [
    "JSONFormatter",
    "REQUEST_ID_HEADER",
    "configure_logging",
    "ensure_request_id",
    "init_app",
    "redact",
]
