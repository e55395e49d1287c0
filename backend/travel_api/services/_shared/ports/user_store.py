from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from travel_api.services._shared.errors import DuplicateRecordError


@dataclass(frozen=True, slots=True)
class UserRecord:
    """
    Read-model for a registered user.

    :ivar id: Opaque user identifier.
    :ivar username: Public handle (trimmed).
    :ivar email: Login email (lowercase, trimmed).
    :ivar password_hash: Salted password hash.
    :ivar created_at: Creation instant (UTC).
    :ivar updated_at: Last update instant (UTC).
    """

    id: str
    username: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime


def normalize_email(email: str) -> str:
    """Return the canonical form used for email storage and lookup."""
    return email.strip().lower()


class UserStore(Protocol):
    """
    Persistence port for users.

    Lookups never raise for a missing user; they return ``None``.
    """

    def find_by_email(self, email: str) -> UserRecord | None: ...

    def find_by_username(self, username: str) -> UserRecord | None: ...

    def find_by_id(self, user_id: str, *, for_update: bool = False) -> UserRecord | None:
        """
        Fetch a user by id.

        :param for_update: Hold a row lock until the unit of work ends. Token
            rotation and replay containment of one user take it first, so they
            run one at a time per user.
        """
        ...

    def create(self, record: UserRecord) -> UserRecord:
        """
        Persist a new user.

        :raises DuplicateRecordError: When email or username is already taken.
        """
        ...


class InMemoryUserStore(UserStore):
    """Dictionary-backed user store for unit tests."""

    def __init__(self, rows: dict[str, UserRecord] | None = None) -> None:
        self.rows: dict[str, UserRecord] = rows if rows is not None else {}

    def find_by_email(self, email: str) -> UserRecord | None:
        wanted = normalize_email(email)
        return next((u for u in self.rows.values() if u.email == wanted), None)

    def find_by_username(self, username: str) -> UserRecord | None:
        wanted = username.strip()
        return next((u for u in self.rows.values() if u.username == wanted), None)

    def find_by_id(self, user_id: str, *, for_update: bool = False) -> UserRecord | None:
        # The in-memory runner already serialises whole units of work
        return self.rows.get(user_id)

    def create(self, record: UserRecord) -> UserRecord:
        if self.find_by_email(record.email) is not None:
            raise DuplicateRecordError("User", "email")
        if self.find_by_username(record.username) is not None:
            raise DuplicateRecordError("User", "username")
        if record.id in self.rows:
            raise DuplicateRecordError("User", "id")
        self.rows[record.id] = record
        return record
