"""
accounts.services._shared.ports
===============================

*Ports* (hexagonal interfaces) for the session-credential lifecycle.

Modules
-------
- :mod:`token_codec`:
    :class:`~.TokenCodec`, :class:`~.TokenKind`, :class:`~.TokenClaims`
    and :class:`~.InvalidToken`: the signed, expiring token contract.

- :mod:`credential_store`:
    :class:`~.CredentialStore`, :class:`~.AccountCredentials` and the
    :class:`~.InMemoryCredentialStore` double.

- :mod:`hash_verifier`:
    :class:`~.HashVerifier`: opaque one-way password hashing.

Concrete adapters live under ``accounts.infra``.
"""

from __future__ import annotations

from .credential_store import AccountCredentials, CredentialStore, InMemoryCredentialStore
from .hash_verifier import HashVerifier
from .token_codec import InvalidToken, TokenClaims, TokenCodec, TokenKind

__all__ = [
    "AccountCredentials",
    "CredentialStore",
    "InMemoryCredentialStore",
    "HashVerifier",
    "InvalidToken",
    "TokenClaims",
    "TokenCodec",
    "TokenKind",
]
