"""Repository package exposing persistence-layer access for domain models."""

from __future__ import annotations

from accounts.repositories.account import AccountRepository
from accounts.repositories.base import BaseRepository

__all__ = ["AccountRepository", "BaseRepository"]
