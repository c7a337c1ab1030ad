"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    AccountSchema,
    ChangePasswordSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
)

__all__ = [
    "AccountSchema",
    "ChangePasswordSchema",
    "LoginSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
]
