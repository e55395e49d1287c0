"""User repository implementing the :class:`UserStore` port."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from travel_api.models.base import ensure_utc
from travel_api.models.user import User
from travel_api.repositories.base import BaseRepository
from travel_api.services._shared.errors import DuplicateRecordError, violates
from travel_api.services._shared.ports.user_store import UserRecord, normalize_email


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    This repository focuses on safe lookup and creation. It NEVER hashes
    passwords or issues tokens; it only manages user rows.
    """

    model = User

    # ---------------------------- Lookup helpers ----------------------------

    def find_by_email(self, email: str) -> UserRecord | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User record or ``None`` when not found.
        :rtype: UserRecord | None
        """
        stmt = select(User).where(User.email == normalize_email(email))
        return self._to_record(self.session.execute(stmt).scalars().first())

    def find_by_username(self, username: str) -> UserRecord | None:
        """Fetch a user by exact (trimmed) username."""
        stmt = select(User).where(User.username == username.strip())
        return self._to_record(self.session.execute(stmt).scalars().first())

    def find_by_id(self, user_id: str, *, for_update: bool = False) -> UserRecord | None:
        """Fetch a user by id, optionally with ``SELECT ... FOR UPDATE``."""
        return self._to_record(self._row(user_id, lock=for_update))

    # ---------------------------- Writes ----------------------------

    def create(self, record: UserRecord) -> UserRecord:
        """Insert a new user row.

        A uniqueness violation leaves the session needing a rollback; callers
        let the error escape the unit of work.

        :param record: User to persist.
        :type record: UserRecord
        :returns: The persisted record (normalised email/username).
        :rtype: UserRecord
        :raises DuplicateRecordError: When email or username is already taken.
        """
        user = User(
            id=record.id,
            email=record.email,
            username=record.username,
            password_hash=record.password_hash,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
        self._insert(user, conflict=_user_conflict)
        return cast(UserRecord, self._to_record(user))

    # ---------------------------- Mapping ----------------------------

    @staticmethod
    def _to_record(user: User | None) -> UserRecord | None:
        if user is None:
            return None
        return UserRecord(
            id=user.id,
            username=user.username,
            email=user.email,
            password_hash=user.password_hash,
            created_at=ensure_utc(user.created_at),
            updated_at=ensure_utc(user.updated_at),
        )


def _user_conflict(exc: IntegrityError) -> DuplicateRecordError | None:
    if violates(exc, "uq_users_email", column="users.email"):
        return DuplicateRecordError("User", "email")
    if violates(exc, "uq_users_username", column="users.username"):
        return DuplicateRecordError("User", "username")
    return None
