"""Account repository: lookups and single-row credential updates."""

from __future__ import annotations

from typing import cast

from sqlalchemy import or_, select, update

from accounts.models.account import Account
from accounts.repositories.base import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Persistence-only repository for :class:`Account`.

    It NEVER issues tokens or checks passwords; it only reads and writes rows.
    """

    model = Account

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_identifier(self, identifier: str) -> Account | None:
        """Fetch an account whose username or email equals ``identifier``.

        :param identifier: Username or email; normalised before matching.
        :type identifier: str
        :returns: Account or ``None`` when not found.
        :rtype: Account | None
        """
        value = identifier.strip().lower()
        stmt = select(Account).where(or_(Account.username == value, Account.email == value))
        return cast(Account | None, self.session.execute(stmt).scalars().first())

    def exists_by_username_or_email(self, username: str, email: str) -> bool:
        """Return ``True`` when either value is already taken."""
        stmt = select(Account.id).where(
            or_(
                Account.username == username.strip().lower(),
                Account.email == email.strip().lower(),
            )
        )
        return self.session.execute(stmt).first() is not None

    # ---------------------------- Credential ops ----------------------------

    def set_refresh_token(
        self,
        account_id: int,
        value: str | None,
        *,
        expected: str | None = None,
        conditional: bool = False,
    ) -> int:
        """Write the refresh-token slot with a single ``UPDATE``.

        :param account_id: Target account.
        :param value: New token, or ``None`` to clear the slot.
        :param expected: Value the slot must still hold when ``conditional``.
        :param conditional: Add ``refresh_token = :expected`` to the ``WHERE``.
        :returns: Number of rows updated (``0`` or ``1``).
        :rtype: int
        """
        stmt = update(Account).where(Account.id == account_id)
        if conditional:
            stmt = stmt.where(Account.refresh_token == expected)
        result = self.session.execute(
            stmt.values(refresh_token=value).execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    def set_password_hash(self, account_id: int, password_hash: str) -> int:
        """Replace the password hash; returns rows updated."""
        result = self.session.execute(
            update(Account)
            .where(Account.id == account_id)
            .values(password_hash=password_hash)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
