# accounts/infra/jwt/token_codec.py
from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

import jwt

from accounts.services._shared.ports import InvalidToken, TokenClaims, TokenCodec, TokenKind
from accounts.services.sessions.dto import SessionConfig

# Claims every token must carry; anything else ends up in ``TokenClaims.extra``
REQUIRED_CLAIMS = ("sub", "type", "iat", "exp", "jti")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class JWTTokenCodec(TokenCodec):
    """
    PyJWT adapter issuing HMAC-signed tokens.

    Expiry is evaluated against the injected ``clock`` rather than PyJWT's own
    wall-clock check, so a token is rejected as soon as ``now >= exp``.

    :param cfg: Session configuration (secret and algorithm are used here).
    :param clock: Returns the current UTC time.
    """

    def __init__(self, cfg: SessionConfig, *, clock: Callable[[], datetime] | None = None) -> None:
        self.cfg = cfg
        self.clock = clock or _utcnow

    def issue(
        self,
        account_id: int | str,
        kind: TokenKind,
        ttl: timedelta,
        claims: dict[str, Any] | None = None,
    ) -> str:
        issued_at = int(self.clock().timestamp())
        payload: dict[str, Any] = dict(claims or {})
        payload.update(
            {
                "sub": str(account_id),
                "type": TokenKind(kind).value,
                "iat": issued_at,
                "exp": issued_at + int(ttl.total_seconds()),
                "jti": uuid4().hex,
            }
        )
        return jwt.encode(payload, self.cfg.secret, algorithm=self.cfg.algorithm)

    def verify(
        self, token: object, expected_kind: TokenKind | None = None
    ) -> TokenClaims | InvalidToken:
        if not isinstance(token, str) or not token:
            return InvalidToken("missing token")

        try:
            payload = jwt.decode(
                token,
                self.cfg.secret,
                algorithms=[self.cfg.algorithm],
                options={
                    "require": list(REQUIRED_CLAIMS),
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.PyJWTError as exc:
            return InvalidToken(f"{exc.__class__.__name__}: {exc}")

        exp, iat = payload["exp"], payload["iat"]
        if not isinstance(exp, int | float) or not isinstance(iat, int | float):
            return InvalidToken("non-numeric iat/exp")
        if self.clock().timestamp() >= exp:
            return InvalidToken("token expired")

        try:
            kind = TokenKind(payload["type"])
        except ValueError:
            return InvalidToken(f"unknown token type {payload['type']!r}")
        if expected_kind is not None and kind is not expected_kind:
            return InvalidToken(f"expected {expected_kind.value} token, got {kind.value}")

        subject, jti = payload["sub"], payload["jti"]
        if not isinstance(subject, str) or not isinstance(jti, str):
            return InvalidToken("malformed sub/jti")

        return TokenClaims(
            account_id=subject,
            kind=kind,
            issued_at=datetime.fromtimestamp(iat, tz=UTC),
            expires_at=datetime.fromtimestamp(exp, tz=UTC),
            jti=jti,
            extra={k: v for k, v in payload.items() if k not in REQUIRED_CLAIMS},
        )
