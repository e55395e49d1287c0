"""
Failures raised by stores, transaction runners and :class:`AuthService`.

Nothing here knows about HTTP; :mod:`travel_api.core.errors` owns the mapping
to status codes and problem documents.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str, *, column: str | None = None) -> bool:
    """
    Tell whether ``exc`` was raised by ``constraint_name``.

    PostgreSQL reports the constraint name; SQLite only names the column
    (``UNIQUE constraint failed: users.email``), hence the ``column`` fallback.
    """
    message = str(exc.orig).lower() if exc.orig else str(exc).lower()
    if constraint_name.lower() in message:
        return True
    return column is not None and column.lower() in message


class ServiceError(Exception):
    """Root of every error the service layer raises on purpose."""


# --------------------------------------------------------------------------- #
# Lookups and uniqueness
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """A lookup by identifier found nothing, e.g. the profile of a deleted user."""

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """A write would duplicate an existing identity.

    :param entity: Affected record type.
    :param detail: Client-safe explanation.
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


class EmailAlreadyExistsError(ConflictError):
    """Registration attempted with an email that already belongs to a user."""

    def __init__(self) -> None:
        super().__init__("User", "email already in use")


class UsernameAlreadyExistsError(ConflictError):
    """Registration attempted with a username that is already taken."""

    def __init__(self) -> None:
        super().__init__("User", "username already in use")


@dataclass(slots=True)
class DuplicateRecordError(ServiceError):
    """Store-level uniqueness violation, mapped by the service to a
    :class:`ConflictError` or a token error."""

    entity: str
    field: str

    def __str__(self) -> str:
        return f"Duplicate {self.entity}.{self.field}"


class ValidationFailedError(ServiceError):
    """Raised when input passed to a service is structurally unusable."""

    def __init__(self, message: str = "Validation failed", *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


# --------------------------------------------------------------------------- #
# Authentication errors
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Base class for failures that must be answered with 401."""

    default_message = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidCredentialsError(AuthenticationError):
    """Unknown email, wrong password or unusable access token.

    The message is identical for every cause so responses do not reveal
    whether an email is registered.
    """

    default_message = "Invalid credentials"


class TokenNotFoundError(AuthenticationError):
    """The refresh token is unknown or was consumed by a concurrent request."""

    default_message = "Refresh token not found"


class TokenExpiredError(AuthenticationError):
    """The refresh token exists but its expiry has passed."""

    default_message = "Refresh token expired"


class TokenRevokedError(AuthenticationError):
    """The refresh token was already consumed (rotation or logout)."""

    default_message = "Refresh token revoked"


# --------------------------------------------------------------------------- #
# Infrastructure errors
# --------------------------------------------------------------------------- #


class InfrastructureError(ServiceError):
    """Storage, signing or transaction failure outside the caller's control."""

    def __init__(self, message: str = "Infrastructure failure") -> None:
        super().__init__(message)


class ConsistencyError(InfrastructureError):
    """Persisted state violates an invariant (e.g. token both active and revoked)."""

    def __init__(self, message: str = "Inconsistent token state") -> None:
        super().__init__(message)
