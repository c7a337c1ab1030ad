# accounts/infra/sqlalchemy/credential_store.py
from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from accounts.models.account import Account
from accounts.repositories.account import AccountRepository
from accounts.services._shared.ports import AccountCredentials, CredentialStore

T = TypeVar("T")


class SQLAlchemyCredentialStore(CredentialStore):
    """
    Credential store over the ``accounts`` table.

    Every write is one ``UPDATE`` on one row followed by a commit, so each
    operation is atomic at the record level. Reads return detached snapshots.

    :param session: SQLAlchemy session (defaults to the Flask-scoped one).
    """

    def __init__(self, session: Session | None = None) -> None:
        self.accounts = AccountRepository(session=session)

    @staticmethod
    def _snapshot(account: Account | None) -> AccountCredentials | None:
        if account is None:
            return None
        return AccountCredentials(
            id=account.id,
            username=account.username,
            email=account.email,
            password_hash=account.password_hash,
            refresh_token=account.refresh_token,
        )

    def _write(self, op: Callable[[], T]) -> T:
        session = self.accounts.session
        try:
            result = op()
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        return result

    # -------------------- reads --------------------

    def find_account_by_identifier(self, identifier: str) -> AccountCredentials | None:
        return self._snapshot(self.accounts.get_by_identifier(identifier))

    def find_account_by_id(self, account_id: int) -> AccountCredentials | None:
        return self._snapshot(self.accounts.get(account_id))

    # -------------------- writes -------------------

    def update_refresh_credential(self, account_id: int, value: str | None) -> None:
        self._write(lambda: self.accounts.set_refresh_token(account_id, value))

    def swap_refresh_credential(self, account_id: int, expected: str, value: str | None) -> bool:
        updated = self._write(
            lambda: self.accounts.set_refresh_token(
                account_id, value, expected=expected, conditional=True
            )
        )
        return updated == 1

    def update_password_hash(self, account_id: int, password_hash: str) -> None:
        self._write(lambda: self.accounts.set_password_hash(account_id, password_hash))
