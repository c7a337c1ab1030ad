"""JSON-lines logging with request correlation and token redaction."""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
_ENVIRON_KEY = "accounts.request_id"

# ``extra=`` keys copied into the JSON payload when present on the record
EXTRA_KEYS = ("endpoint", "elapsed_ms", "account_id", "event")

# Three base64url segments starting with an encoded ``{"``: a JWT
_JWT_PATTERN = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]*")
REDACTED = "[redacted-token]"


def redact_tokens(text: str) -> str:
    """Replace anything shaped like a JWT in ``text``."""
    return _JWT_PATTERN.sub(REDACTED, text)


class JSONFormatter(logging.Formatter):
    """One JSON object per record; token-shaped strings never reach the output."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": redact_tokens(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = redact_tokens(self.formatException(record.exc_info))
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Attach ``request_id`` to every record (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """
    Return the id of the current request.

    The first call per request adopts an incoming correlation header or
    mints a UUID4 and caches it in the WSGI environ. Outside a request a
    fresh UUID4 is returned every time.
    """
    if not has_request_context():
        return str(uuid4())

    environ = request.environ
    if _ENVIRON_KEY not in environ:
        incoming = next(
            (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None
        )
        environ[_ENVIRON_KEY] = incoming or str(uuid4())
    return environ[_ENVIRON_KEY]


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout as JSON lines at ``level``."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level.upper() if isinstance(level, str) else level)


def init_app(app: Flask) -> None:
    """Seed the request id early and echo it on every response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = [
    "REQUEST_ID_HEADER",
    "configure_logging",
    "ensure_request_id",
    "init_app",
    "redact_tokens",
]
