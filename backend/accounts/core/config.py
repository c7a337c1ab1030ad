"""Settings classes per environment, read from process env (and ``.env``)."""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'
PLACEHOLDER_SECRET: Final[str] = "CHANGE_ME"

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})

load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Read ``name`` as a flag; unset means ``default``."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    """Read ``name`` as an integer; unset or blank means ``default``."""
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


class BaseConfig:
    """Settings shared by every environment.

    Session credentials
    -------------------
    JWT_SECRET_KEY / JWT_ALGORITHM
        HMAC key and algorithm for both token kinds.
    ACCESS_TOKEN_TTL_SECONDS / REFRESH_TOKEN_TTL_SECONDS
        Lifetimes; 15 minutes and 10 days unless overridden.
    REFRESH_COMPARE_AND_SWAP
        Rotation writes only land if the slot still holds the presented
        token; the loser of a race gets ``409``.
    REFRESH_REVOKE_ON_REUSE
        Presenting a rotated-away refresh token clears the session.
    AUTH_GENERIC_ERRORS
        Login answers "unknown account" with the same ``401`` as a bad password.
    PASSWORD_HASH_METHOD
        Werkzeug method string for new password hashes.

    Cookies
    -------
    ACCESS_COOKIE_NAME / REFRESH_COOKIE_NAME
        Names of the HttpOnly cookies carrying the pair.
    SESSION_COOKIE_SECURE_FLAG / SESSION_COOKIE_SAMESITE_POLICY
        ``Secure`` and ``SameSite`` attributes of those cookies.
    """

    API_BASE_PREFIX = "/api"
    SECRET_KEY = os.getenv("SECRET_KEY", PLACEHOLDER_SECRET)

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", PLACEHOLDER_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 15 * 60)
    REFRESH_TOKEN_TTL_SECONDS = env_int("REFRESH_TOKEN_TTL_SECONDS", 10 * 24 * 60 * 60)
    REFRESH_COMPARE_AND_SWAP = env_bool("REFRESH_COMPARE_AND_SWAP", True)
    REFRESH_REVOKE_ON_REUSE = env_bool("REFRESH_REVOKE_ON_REUSE", False)
    AUTH_GENERIC_ERRORS = env_bool("AUTH_GENERIC_ERRORS", False)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    ACCESS_COOKIE_NAME = os.getenv("ACCESS_COOKIE_NAME", "access_token")
    REFRESH_COOKIE_NAME = os.getenv("REFRESH_COOKIE_NAME", "refresh_token")
    SESSION_COOKIE_SECURE_FLAG = env_bool("SESSION_COOKIE_SECURE_FLAG", True)
    SESSION_COOKIE_SAMESITE_POLICY = os.getenv("SESSION_COOKIE_SAMESITE_POLICY", "Lax")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./accounts.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = env_int("CORS_MAX_AGE", 600)

    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local development: debug on, plain-HTTP friendly cookies by default."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SESSION_COOKIE_SECURE_FLAG = env_bool("SESSION_COOKIE_SECURE_FLAG", False)


class TestingConfig(BaseConfig):
    """Test runs.

    In-memory SQLite (unless ``TEST_DATABASE_URL`` is set), a fixed signing
    key and a cheap hash method keep suites fast and deterministic.
    """

    TESTING = True
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = False
    JWT_SECRET_KEY = "testing-jwt-secret-key-with-enough-entropy"
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    """Production: everything from the environment; placeholders are refused."""

    SQLALCHEMY_ECHO = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Pick the settings class named by ``APP_ENV`` (development when unknown)."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def check_secrets(config: Mapping[str, Any]) -> None:
    """
    Refuse to run outside debug/testing with placeholder signing keys.

    :param config: Loaded Flask config.
    :raises RuntimeError: ``SECRET_KEY`` or ``JWT_SECRET_KEY`` is unset.
    """
    if config.get("DEBUG") or config.get("TESTING"):
        return
    missing = [
        key
        for key in ("SECRET_KEY", "JWT_SECRET_KEY")
        if not config.get(key) or config.get(key) == PLACEHOLDER_SECRET
    ]
    if missing:
        raise RuntimeError(f"Set {', '.join(missing)} before starting in production")
