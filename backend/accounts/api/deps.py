"""Shared API helpers: service wiring, the access-token guard and cookies."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request

from accounts.core.errors import Unauthorized
from accounts.core.extensions import db
from accounts.infra.jwt.token_codec import JWTTokenCodec
from accounts.infra.security.password_hasher import WerkzeugPasswordHasher
from accounts.infra.sqlalchemy.credential_store import SQLAlchemyCredentialStore
from accounts.services._shared.ports import InvalidToken, TokenKind
from accounts.services.accounts import AccountService
from accounts.services.sessions import CredentialPair, SessionConfig, SessionManager

F = TypeVar("F", bound=Callable[..., Any])


# ------------------------------- Wiring ------------------------------------ #


def session_config() -> SessionConfig:
    """Build the explicit session config from the current app's settings."""
    return SessionConfig.from_mapping(current_app.config)


def password_hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(method=current_app.config.get("PASSWORD_HASH_METHOD", "scrypt"))


def get_session_manager() -> SessionManager:
    """Return a session manager bound to the request's database session."""
    cfg = session_config()
    return SessionManager(
        cfg=cfg,
        codec=JWTTokenCodec(cfg),
        store=SQLAlchemyCredentialStore(db.session),
        hasher=password_hasher(),
    )


def get_account_service() -> AccountService:
    return AccountService(hasher=password_hasher(), session=db.session)


# ----------------------------- Responses ----------------------------------- #


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
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# ------------------------------ Cookies ------------------------------------ #


def _cookie_options() -> dict[str, Any]:
    cfg = current_app.config
    return {
        "httponly": True,
        "secure": bool(cfg.get("SESSION_COOKIE_SECURE_FLAG", True)),
        "samesite": cfg.get("SESSION_COOKIE_SAMESITE_POLICY") or None,
        "path": "/",
    }


def set_credential_cookies(response: Response, pair: CredentialPair) -> Response:
    """Attach both tokens as HttpOnly (and, by default, Secure) cookies."""
    cfg = current_app.config
    options = _cookie_options()
    response.set_cookie(cfg["ACCESS_COOKIE_NAME"], pair.access_token, **options)
    response.set_cookie(cfg["REFRESH_COOKIE_NAME"], pair.refresh_token, **options)
    return response


def clear_credential_cookies(response: Response) -> Response:
    """Expire both credential cookies with the attributes they were set with."""
    cfg = current_app.config
    options = _cookie_options()
    for name in (cfg["ACCESS_COOKIE_NAME"], cfg["REFRESH_COOKIE_NAME"]):
        response.delete_cookie(name, **options)
    return response


def presented_refresh_token(body: dict[str, Any]) -> str | None:
    """Refresh token from the cookie, falling back to the request body."""
    return request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"]) or body.get(
        "refresh_token"
    )


# ---------------------------- Access guard --------------------------------- #


def _presented_access_token() -> str | None:
    token = request.cookies.get(current_app.config["ACCESS_COOKIE_NAME"])
    if token:
        return token
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def require_auth(func: F) -> F:
    """Require a valid access token naming an existing account.

    On success the account id is available as ``g.account_id``.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        token = _presented_access_token()
        if not token:
            raise Unauthorized("Unauthorized request")

        claims = JWTTokenCodec(session_config()).verify(token, expected_kind=TokenKind.ACCESS)
        if isinstance(claims, InvalidToken) or not claims.account_id.isdigit():
            raise Unauthorized("Invalid access token")

        account_id = int(claims.account_id)
        if SQLAlchemyCredentialStore(db.session).find_account_by_id(account_id) is None:
            raise Unauthorized("Invalid access token")

        g.account_id = account_id
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
