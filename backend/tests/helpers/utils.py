"""Tiny helpers shared across test modules."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta


def tamper(token: str, segment: int) -> str:
    """Return ``token`` with the first character of one JWT segment replaced.

    The leading base64url character covers the top six bits of the first
    byte, so any replacement changes the decoded bytes.
    """
    parts = token.split(".")
    head = parts[segment][0]
    parts[segment] = ("g" if head != "g" else "A") + parts[segment][1:]
    return ".".join(parts)


def set_cookie_values(response, name: str) -> list[str]:
    """Return the raw ``Set-Cookie`` headers emitted for cookie ``name``."""
    return [h for h in response.headers.getlist("Set-Cookie") if h.startswith(f"{name}=")]


TEST_PASSWORD = "Passw0rd!"


class FakeClock:
    """Manually advanced UTC clock for expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)
