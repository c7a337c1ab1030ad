"""
DTOs for AccountService.

They keep the ORM model (and its password hash / refresh token) out of the
API layer.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AccountRegisterIn:
    """
    Input DTO for registration.

    :param username: Public handle (stored lower-cased).
    :type username: str
    :param email: Login email (stored lower-cased).
    :type email: str
    :param full_name: Display name.
    :type full_name: str
    :param password: Raw password, hashed before persistence.
    :type password: str
    """

    username: str
    email: str
    full_name: str
    password: str


@dataclass(frozen=True, slots=True)
class AccountPublicOut:
    """Public-safe account representation (no hash, no refresh token)."""

    id: int
    username: str
    email: str
    full_name: str
