from __future__ import annotations

from typing import Protocol


class HashVerifier(Protocol):
    """Port for one-way password hashing; hashes are never reversed."""

    def hash(self, secret: str) -> str: ...

    def verify(self, secret: str, hashed: str) -> bool: ...
