# accounts/services/sessions/service.py
from __future__ import annotations

import logging

from accounts.services._shared.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
)
from accounts.services._shared.ports import (
    AccountCredentials,
    CredentialStore,
    HashVerifier,
    InvalidToken,
    TokenCodec,
    TokenKind,
)
from accounts.services.sessions.dto import CredentialPair, SessionConfig

log = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid user credentials"
INVALID_REFRESH = "Invalid refresh token"
STALE_REFRESH = "Refresh token is expired or used"


class SessionManager:
    """
    Credential lifecycle service (login / refresh / logout / password change).

    Each account has a single refresh-token slot in the credential store.
    Login and rotation overwrite it, logout clears it, and a refresh token is
    only accepted while it is byte-for-byte equal to the stored value. That
    equality check is what rejects replayed (rotated-away) tokens.
    """

    def __init__(
        self,
        *,
        cfg: SessionConfig,
        codec: TokenCodec,
        store: CredentialStore,
        hasher: HashVerifier,
    ) -> None:
        """
        Initialize the manager with its collaborators.

        :param cfg: Token lifetimes and hardening switches.
        :param codec: Issues and verifies signed tokens.
        :param store: Per-account credential persistence.
        :param hasher: One-way password verification.
        """
        self.cfg = cfg
        self.codec = codec
        self.store = store
        self.hasher = hasher

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def authenticate(self, identifier: str, secret: str) -> CredentialPair:
        """
        Verify credentials and start a session.

        :param identifier: Username or email.
        :param secret: Plain-text password.
        :returns: Fresh credential pair; its refresh token is now the stored one.
        :raises NotFoundError: No account matches ``identifier``.
        :raises UnauthorizedError: ``secret`` does not match.
        """
        account = self.store.find_account_by_identifier(identifier)
        if account is None:
            if self.cfg.generic_auth_errors:
                raise UnauthorizedError(INVALID_CREDENTIALS)
            raise NotFoundError("Account", identifier, "User does not exist")

        if not self.hasher.verify(secret, account.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        pair = self._issue_and_store(account)
        log.info("session.login", extra={"event": "login", "account_id": account.id})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh with rotation
    # ------------------------------------------------------------------ #

    def rotate(self, presented_refresh_token: str | None) -> CredentialPair:
        """
        Exchange the current refresh token for a new pair.

        :param presented_refresh_token: Refresh token sent by the client.
        :returns: New credential pair; the presented token is no longer valid.
        :raises UnauthorizedError: Token missing, invalid, expired, of the
            wrong kind, for an unknown account, or not the stored one.
        :raises ConflictError: A concurrent rotation replaced the token first
            (only with compare-and-swap enabled).
        """
        if not presented_refresh_token:
            raise UnauthorizedError("Unauthorized request")

        claims = self.codec.verify(presented_refresh_token, expected_kind=TokenKind.REFRESH)
        if isinstance(claims, InvalidToken):
            log.info("session.refresh_rejected", extra={"event": claims.reason})
            raise UnauthorizedError(INVALID_REFRESH)

        account = self.store.find_account_by_id(self._coerce_account_id(claims.account_id))
        if account is None:
            raise UnauthorizedError(INVALID_REFRESH)

        if account.refresh_token != presented_refresh_token:
            self._on_reuse(account)
            raise UnauthorizedError(STALE_REFRESH)

        pair = self._issue_and_store(account, expected=presented_refresh_token)
        log.info("session.rotated", extra={"event": "rotate", "account_id": account.id})
        return pair

    # ------------------------------------------------------------------ #
    # Logout / password
    # ------------------------------------------------------------------ #

    def logout(self, account_id: int) -> None:
        """Clear the stored refresh token. Safe to call repeatedly."""
        self.store.update_refresh_credential(account_id, None)
        log.info("session.logout", extra={"event": "logout", "account_id": account_id})

    def change_secret(self, account_id: int, old_secret: str, new_secret: str) -> None:
        """
        Replace the password hash after verifying the old password.

        Existing refresh tokens stay valid.

        :raises NotFoundError: Unknown account.
        :raises UnauthorizedError: ``old_secret`` does not match.
        """
        account = self.store.find_account_by_id(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        if not self.hasher.verify(old_secret, account.password_hash):
            raise UnauthorizedError("Invalid old password")
        self.store.update_password_hash(account_id, self.hasher.hash(new_secret))

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _issue_and_store(
        self, account: AccountCredentials, *, expected: str | None = None
    ) -> CredentialPair:
        """
        Mint a pair and write its refresh token into the account slot.

        With ``expected`` and compare-and-swap enabled, the write only lands
        if the slot still holds ``expected``.
        """
        try:
            pair = CredentialPair(
                access_token=self.codec.issue(
                    account.id,
                    TokenKind.ACCESS,
                    self.cfg.access_ttl,
                    claims={"username": account.username, "email": account.email},
                ),
                refresh_token=self.codec.issue(account.id, TokenKind.REFRESH, self.cfg.refresh_ttl),
            )
            if expected is not None and self.cfg.compare_and_swap:
                swapped = self.store.swap_refresh_credential(
                    account.id, expected, pair.refresh_token
                )
                if not swapped:
                    log.warning(
                        "session.rotation_conflict",
                        extra={"event": "rotation_conflict", "account_id": account.id},
                    )
                    raise ConflictError("Account", "Refresh token was rotated concurrently")
            else:
                self.store.update_refresh_credential(account.id, pair.refresh_token)
        except ServiceError:
            raise
        except Exception as exc:
            log.exception("session.issue_failed", extra={"account_id": account.id})
            raise InternalError(
                "Something went wrong while generating access and refresh tokens"
            ) from exc
        return pair

    def _on_reuse(self, account: AccountCredentials) -> None:
        log.warning("session.refresh_reuse", extra={"event": "reuse", "account_id": account.id})
        if self.cfg.revoke_on_reuse and account.refresh_token is not None:
            self.store.update_refresh_credential(account.id, None)

    @staticmethod
    def _coerce_account_id(subject: str) -> int:
        """Turn the token subject back into an account id."""
        if subject.isdigit():
            return int(subject)
        raise UnauthorizedError(INVALID_REFRESH)
