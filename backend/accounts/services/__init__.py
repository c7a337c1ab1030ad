"""Service layer public API.

Re-exports
----------
- Session lifecycle (from ``accounts.services.sessions``)
    * :class:`SessionManager`, :class:`SessionConfig`, :class:`CredentialPair`
- Accounts (from ``accounts.services.accounts``)
    * :class:`AccountService`, :class:`AccountRegisterIn`, :class:`AccountPublicOut`
"""

from __future__ import annotations

from .accounts import AccountPublicOut, AccountRegisterIn, AccountService
from .sessions import CredentialPair, SessionConfig, SessionManager

__all__ = [
    "SessionManager",
    "SessionConfig",
    "CredentialPair",
    "AccountService",
    "AccountRegisterIn",
    "AccountPublicOut",
]
