from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Protocol


class TokenKind(str, Enum):
    """Kinds of signed credential; stored in the ``type`` claim."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Verified token content.

    :ivar account_id: Subject (``sub``) as issued.
    :ivar kind: Access or refresh.
    :ivar issued_at: ``iat`` (UTC).
    :ivar expires_at: ``exp`` (UTC).
    :ivar jti: Unique token id.
    :ivar extra: Any additional claims.
    """

    account_id: str
    kind: TokenKind
    issued_at: datetime
    expires_at: datetime
    jti: str
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class InvalidToken:
    """Typed verification failure; ``reason`` is for logs, not for clients."""

    reason: str


class TokenCodec(Protocol):
    """Port for issuing and verifying signed, expiring tokens."""

    def issue(
        self,
        account_id: int | str,
        kind: TokenKind,
        ttl: timedelta,
        claims: dict[str, Any] | None = None,
    ) -> str: ...

    def verify(
        self, token: object, expected_kind: TokenKind | None = None
    ) -> TokenClaims | InvalidToken: ...
