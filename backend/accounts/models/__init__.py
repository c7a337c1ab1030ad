"""SQLAlchemy models registered on the shared metadata."""

from __future__ import annotations

from .account import Account
from .base import PKMixin, ReprMixin, TimestampMixin

__all__ = ["Account", "PKMixin", "ReprMixin", "TimestampMixin"]
