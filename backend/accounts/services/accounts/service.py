"""
AccountService
==============

Registration and read access for the ``Account`` aggregate. Credentials
beyond the initial password hash are owned by the session manager.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from accounts.models.account import Account
from accounts.repositories.account import AccountRepository
from accounts.services._shared.errors import ConflictError, NotFoundError, ValidationError
from accounts.services._shared.ports import HashVerifier
from accounts.services.accounts.dto import AccountPublicOut, AccountRegisterIn

log = logging.getLogger(__name__)

DUPLICATE_ACCOUNT = "User with this email or username already exists"


def _public(account: Account) -> AccountPublicOut:
    return AccountPublicOut(
        id=account.id,
        username=account.username,
        email=account.email,
        full_name=account.full_name,
    )


class AccountService:
    """
    Application service for registering and reading accounts.

    :param hasher: Hash verifier used to hash the initial password.
    :param session: SQLAlchemy session (defaults to the Flask-scoped one).
    """

    def __init__(self, *, hasher: HashVerifier, session: Session | None = None) -> None:
        self.hasher = hasher
        self.accounts = AccountRepository(session=session)

    def register(self, dto: AccountRegisterIn) -> AccountPublicOut:
        """
        Create an account.

        :raises ValidationError: A required field is blank.
        :raises ConflictError: Username or email already taken.
        """
        if any(not (value or "").strip() for value in (dto.username, dto.email, dto.full_name)):
            raise ValidationError("All fields are required")
        if not dto.password:
            raise ValidationError("All fields are required")

        if self.accounts.exists_by_username_or_email(dto.username, dto.email):
            raise ConflictError("Account", DUPLICATE_ACCOUNT)

        session = self.accounts.session
        try:
            account = self.accounts.add(
                Account(
                    username=dto.username,
                    email=dto.email,
                    full_name=dto.full_name.strip(),
                    password_hash=self.hasher.hash(dto.password),
                )
            )
            session.commit()
        except IntegrityError as exc:
            # Lost a uniqueness race with a concurrent registration
            session.rollback()
            raise ConflictError("Account", DUPLICATE_ACCOUNT) from exc

        log.info("account.registered", extra={"event": "register", "account_id": account.id})
        return _public(account)

    def get_account(self, account_id: int) -> AccountPublicOut:
        """
        Return the public representation of an account.

        :raises NotFoundError: Unknown account.
        """
        account = self.accounts.get(account_id)
        if account is None:
            raise NotFoundError("Account", account_id)
        return _public(account)

    def find_by_identifier(self, identifier: str) -> AccountPublicOut:
        """
        Return the account matching a username or email.

        :raises NotFoundError: No account matches.
        """
        account = self.accounts.get_by_identifier(identifier)
        if account is None:
            raise NotFoundError("Account", identifier)
        return _public(account)
