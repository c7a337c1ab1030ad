# accounts/infra/security/password_hasher.py
from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from accounts.services._shared.ports import HashVerifier


@dataclass(slots=True)
class WerkzeugPasswordHasher(HashVerifier):
    """
    Hash verifier backed by :mod:`werkzeug.security`.

    :param method: Werkzeug method string, e.g. ``"scrypt"`` or
        ``"pbkdf2:sha256:600000"``.
    """

    method: str = "scrypt"

    def hash(self, secret: str) -> str:
        if not isinstance(secret, str) or not secret:
            raise ValueError("Password must be a non-empty string.")
        return generate_password_hash(secret, method=self.method)

    def verify(self, secret: str, hashed: str) -> bool:
        if not hashed or not isinstance(secret, str):
            return False
        # ``check_password_hash`` is untyped; coerce for mypy.
        return bool(check_password_hash(hashed, secret))
