"""Session-credential lifecycle: token pairs, rotation and logout."""

from __future__ import annotations

from .dto import CredentialPair, SessionConfig
from .service import SessionManager

__all__ = ["CredentialPair", "SessionConfig", "SessionManager"]
