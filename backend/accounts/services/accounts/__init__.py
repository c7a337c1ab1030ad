"""Account registration and lookup."""

from __future__ import annotations

from .dto import AccountPublicOut, AccountRegisterIn
from .service import AccountService

__all__ = ["AccountPublicOut", "AccountRegisterIn", "AccountService"]
