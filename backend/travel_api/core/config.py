"""Settings for the travel API, one class per deployment environment.

Values come from the process environment (and a local ``.env`` file) when
the module is imported; :func:`validate_config` rejects unusable combinations
before the application starts serving.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Final

from dotenv import load_dotenv

ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

PLACEHOLDER_JWT_SECRET: Final[str] = "CHANGE_ME_JWT"
MIN_JWT_SECRET_LENGTH: Final[int] = 32

# Loads .env during development (no-op when the file is missing)
load_dotenv()

_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})


def env_bool(name: str, default: bool = False) -> bool:
    """Read ``name`` as a flag; unset means ``default``, anything else is
    true only for ``1``, ``true``, ``yes``, ``y`` or ``on``."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable.

    Unparseable values fall back to ``default`` so a typo never prevents the
    process from booting; :func:`validate_config` still rejects values that
    make no sense (e.g. non-positive TTLs).
    """
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class ConfigError(ValueError):
    """Raised when the loaded configuration is unusable.

    :param problems: One human-readable message per invalid setting.
    :type problems: list[str]
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        if len(self.problems) == 1:
            message = f"config validation failed: {self.problems[0]}"
        else:
            message = "multiple config validation errors:\n" + "\n".join(
                f"  - {p}" for p in self.problems
            )
        super().__init__(message)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    SECRET_KEY: str
        Flask secret used for session signing.
    JWT_SECRET_KEY: str
        HMAC key used to sign access tokens.
    JWT_ALGORITHM: str
        JWS algorithm for access tokens (``HS256``).
    JWT_ISSUER / JWT_AUDIENCE: str
        Registered claims written on signing and enforced on verification.
    ACCESS_TOKEN_TTL_SECONDS: int
        Access token lifetime (minutes-scale).
    REFRESH_TOKEN_TTL_SECONDS: int
        Refresh token lifetime (days-scale).
    REFRESH_TOKEN_BYTES: int
        Entropy of generated refresh token identifiers.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.
    PASSWORD_HASH_METHOD: str
        Werkzeug hashing method for stored passwords.
    USE_PROXYFIX / PROXYFIX_HOPS: bool / int
        Trust of upstream ``X-Forwarded-*`` headers.
    """

    APP_ENV = "development"
    APP_VERSION = os.getenv("APP_VERSION", "dev")
    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", PLACEHOLDER_JWT_SECRET)
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "travel-api")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE", "travel-api")

    # Token lifetimes
    ACCESS_TOKEN_TTL_SECONDS = env_int("ACCESS_TOKEN_TTL_SECONDS", 15 * 60)
    REFRESH_TOKEN_TTL_SECONDS = env_int("REFRESH_TOKEN_TTL_SECONDS", 7 * 24 * 60 * 60)
    REFRESH_TOKEN_BYTES = env_int("REFRESH_TOKEN_BYTES", 32)

    # Password hashing (werkzeug method string)
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    # Bound values include bearer tokens; keep them out of exception text and logs
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {"hide_parameters": True}

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    CORS_MAX_AGE = env_int("CORS_MAX_AGE", 600)

    # Reverse proxy
    USE_PROXYFIX = env_bool("USE_PROXYFIX", True)
    PROXYFIX_HOPS = env_int("PROXYFIX_HOPS", 1)

    # Flask built-ins
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Local runs: debug on unless ``FLASK_DEBUG`` says otherwise."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)


class TestingConfig(BaseConfig):
    """Test runs: in-memory SQLite unless ``TEST_DATABASE_URL`` is set, a
    fixed signing key and a cheap password hash."""

    APP_ENV = "testing"
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    PROPAGATE_EXCEPTIONS = True
    # Cheap hashes keep the suite fast
    PASSWORD_HASH_METHOD = "pbkdf2:sha256:1000"
    JWT_SECRET_KEY = os.getenv("TEST_JWT_SECRET_KEY", "testing-secret-key-with-32-plus-bytes")


class ProductionConfig(BaseConfig):
    """Deployed service. :func:`validate_config` additionally demands a real
    ``JWT_SECRET_KEY`` of at least ``MIN_JWT_SECRET_LENGTH`` characters."""

    APP_ENV = "production"
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Pick the settings class named by ``APP_ENV`` (development by default)."""
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)


def validate_config(config: Mapping[str, Any]) -> None:
    """Check cross-field constraints of a loaded configuration.

    All problems are collected and reported together.

    :param config: Flask ``app.config`` (or any mapping with the same keys).
    :type config: Mapping[str, Any]
    :raises ConfigError: When at least one setting is invalid.
    """
    problems: list[str] = []

    access_ttl = int(config.get("ACCESS_TOKEN_TTL_SECONDS", 0))
    refresh_ttl = int(config.get("REFRESH_TOKEN_TTL_SECONDS", 0))
    token_bytes = int(config.get("REFRESH_TOKEN_BYTES", 0))

    if access_ttl <= 0:
        problems.append(f"[ACCESS_TOKEN_TTL_SECONDS={access_ttl}] must be positive")
    if refresh_ttl <= 0:
        problems.append(f"[REFRESH_TOKEN_TTL_SECONDS={refresh_ttl}] must be positive")
    if access_ttl > refresh_ttl > 0:
        problems.append(
            "[ACCESS_TOKEN_TTL_SECONDS] must not be greater than REFRESH_TOKEN_TTL_SECONDS"
        )
    if token_bytes < 16:
        problems.append(f"[REFRESH_TOKEN_BYTES={token_bytes}] must be at least 16")

    secret = str(config.get("JWT_SECRET_KEY") or "")
    if not secret:
        problems.append("[JWT_SECRET_KEY] required")
    elif str(config.get("APP_ENV", "")).lower() == "production":
        if secret == PLACEHOLDER_JWT_SECRET:
            problems.append("[JWT_SECRET_KEY=***] placeholder value is not allowed")
        elif len(secret) < MIN_JWT_SECRET_LENGTH:
            problems.append(
                f"[JWT_SECRET_KEY=***] must be at least {MIN_JWT_SECRET_LENGTH} characters"
            )

    if problems:
        raise ConfigError(problems)
