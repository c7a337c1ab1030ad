"""Account model: login identity plus the single refresh-token slot."""

from __future__ import annotations

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from accounts.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class Account(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Registered account.

    Fields
    ------
    username : str
        Public handle. Stored lower-cased and trimmed; unique.
    email : str
        Login email. Stored lower-cased and trimmed; unique.
    full_name : str
        Display name.
    password_hash : str
        Opaque hash produced by the configured hash verifier.
    refresh_token : str | None
        The only live refresh token for this account. ``None`` means there is
        no active session; login and rotation overwrite it, logout clears it.
    """

    __tablename__ = "accounts"

    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("username", name="uq_accounts_username"),
        UniqueConstraint("email", name="uq_accounts_email"),
    )

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and sanity-check the email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        """
        Normalize the username (trim + lower-case).

        :raises ValueError: If username is missing or only whitespace.
        """
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip().lower()
