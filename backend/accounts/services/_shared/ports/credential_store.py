from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Protocol


@dataclass(frozen=True, slots=True)
class AccountCredentials:
    """
    Read-model of the credential-relevant part of an account.

    :ivar id: Account identifier.
    :ivar username: Lower-cased username (used as a token claim).
    :ivar email: Lower-cased email (used as a token claim).
    :ivar password_hash: Opaque hash checked by the hash verifier.
    :ivar refresh_token: Currently stored refresh token, ``None`` when logged out.
    """

    id: int
    username: str
    email: str
    password_hash: str
    refresh_token: str | None = None


class CredentialStore(Protocol):
    """
    Per-account credential persistence.

    Each write targets a single account record and MUST be atomic for that
    record. Lookups return snapshots; callers never mutate them.
    """

    def find_account_by_identifier(self, identifier: str) -> AccountCredentials | None:
        """Return the account whose username *or* email equals ``identifier``."""

    def find_account_by_id(self, account_id: int) -> AccountCredentials | None:
        """Return the account with ``account_id`` (if present)."""

    def update_refresh_credential(self, account_id: int, value: str | None) -> None:
        """Overwrite (or clear, with ``None``) the stored refresh token."""

    def swap_refresh_credential(self, account_id: int, expected: str, value: str | None) -> bool:
        """
        Overwrite the stored refresh token only if it still equals ``expected``.

        :returns: ``True`` when the write happened, ``False`` when another
            writer changed the slot first.
        """

    def update_password_hash(self, account_id: int, password_hash: str) -> None:
        """Replace the stored password hash."""


class InMemoryCredentialStore(CredentialStore):
    """
    Dictionary-backed store used by unit tests.

    .. note::
       A lock makes each single-record write atomic, mirroring a row update.
    """

    def __init__(self) -> None:
        self._by_id: dict[int, AccountCredentials] = {}
        self._seq = 0
        self._lock = threading.Lock()
        self.writes = 0

    def add(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        refresh_token: str | None = None,
    ) -> AccountCredentials:
        """Insert an account and return its snapshot (test helper)."""
        with self._lock:
            self._seq += 1
            account = AccountCredentials(
                id=self._seq,
                username=username.strip().lower(),
                email=email.strip().lower(),
                password_hash=password_hash,
                refresh_token=refresh_token,
            )
            self._by_id[account.id] = account
            return account

    def find_account_by_identifier(self, identifier: str) -> AccountCredentials | None:
        value = identifier.strip().lower()
        with self._lock:
            for account in self._by_id.values():
                if value in (account.username, account.email):
                    return account
        return None

    def find_account_by_id(self, account_id: int) -> AccountCredentials | None:
        with self._lock:
            return self._by_id.get(account_id)

    def update_refresh_credential(self, account_id: int, value: str | None) -> None:
        with self._lock:
            account = self._by_id.get(account_id)
            if account is not None:
                self._by_id[account_id] = replace(account, refresh_token=value)
            self.writes += 1

    def swap_refresh_credential(self, account_id: int, expected: str, value: str | None) -> bool:
        with self._lock:
            account = self._by_id.get(account_id)
            if account is None or account.refresh_token != expected:
                return False
            self._by_id[account_id] = replace(account, refresh_token=value)
            self.writes += 1
            return True

    def update_password_hash(self, account_id: int, password_hash: str) -> None:
        with self._lock:
            account = self._by_id.get(account_id)
            if account is not None:
                self._by_id[account_id] = replace(account, password_hash=password_hash)
            self.writes += 1
