"""CORS policy for the API, aware of cookie-delivered credentials."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from accounts.core.logger import REQUEST_ID_HEADER


def init_app(app: Flask) -> None:
    """Configure CORS for ``/api/*`` from ``CORS_ORIGINS``.

    Credential cookies are only readable cross-origin when the browser is
    allowed to send credentials, which CORS forbids together with a wildcard
    origin. An explicit origin list therefore enables
    ``supports_credentials``; ``"*"`` or an empty value disables it.
    """
    origins = [o.strip() for o in app.config.get("CORS_ORIGINS", "").split(",") if o.strip()]
    allow_any = not origins or origins == ["*"]

    CORS(
        app,
        resources={r"/api/*": {"origins": "*" if allow_any else origins}},
        supports_credentials=not allow_any,
        expose_headers=[REQUEST_ID_HEADER],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
