# accounts/services/sessions/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class CredentialPair:
    """
    Access and refresh tokens issued together.

    :param access_token: Encoded access JWT (never persisted).
    :type access_token: str
    :param refresh_token: Encoded refresh JWT (persisted on the account).
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """
    Explicit configuration for the token codec and the session manager.

    :param secret: HMAC signing key.
    :type secret: str
    :param algorithm: JWT signing algorithm.
    :type algorithm: str
    :param access_ttl: Access token lifetime.
    :type access_ttl: timedelta
    :param refresh_ttl: Refresh token lifetime.
    :type refresh_ttl: timedelta
    :param compare_and_swap: Condition rotation writes on the old value.
    :type compare_and_swap: bool
    :param revoke_on_reuse: Clear the slot when a stale token is presented.
    :type revoke_on_reuse: bool
    :param generic_auth_errors: Hide whether the account exists on login.
    :type generic_auth_errors: bool
    """

    secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=10)
    compare_and_swap: bool = True
    revoke_on_reuse: bool = False
    generic_auth_errors: bool = False

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> SessionConfig:
        """
        Build the struct from a Flask config (or any mapping).

        :param config: Mapping holding the keys documented on ``BaseConfig``.
        :returns: Frozen configuration.
        """
        return cls(
            secret=str(config["JWT_SECRET_KEY"]),
            algorithm=str(config.get("JWT_ALGORITHM", "HS256")),
            access_ttl=timedelta(seconds=int(config.get("ACCESS_TOKEN_TTL_SECONDS", 900))),
            refresh_ttl=timedelta(seconds=int(config.get("REFRESH_TOKEN_TTL_SECONDS", 864000))),
            compare_and_swap=bool(config.get("REFRESH_COMPARE_AND_SWAP", True)),
            revoke_on_reuse=bool(config.get("REFRESH_REVOKE_ON_REUSE", False)),
            generic_auth_errors=bool(config.get("AUTH_GENERIC_ERRORS", False)),
        )
