"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask, HTTP or
SQLAlchemy. The translation to HTTP responses (RFC 7807) happens in
``accounts/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - The API layer maps each subclass to a status code.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class ValidationError(ServiceError):
    """Raised when required input is missing or malformed."""


class UnauthorizedError(ServiceError):
    """Raised for bad secrets and bad, expired or stale tokens."""


class InternalError(ServiceError):
    """
    Raised when issuing credentials or writing the store fails unexpectedly.

    The message is safe for clients; the root cause stays on ``__cause__``.
    """


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is not found in the store.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param key: Identifier or search key.
    :type key: str | int
    :param message: Optional client-facing message overriding the default.
    :type message: str | None
    """

    entity: str
    key: str | int
    message: str | None = None

    def __str__(self) -> str:
        return self.message or f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or concurrent write conflict occurs.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return self.detail
