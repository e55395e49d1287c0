from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from typing import Protocol

from travel_api.services._shared.errors import DuplicateRecordError

# Longest bearer value a store can hold (matches the id column width)
MAX_TOKEN_ID_LENGTH = 64


class RotationResult(Enum):
    """Outcome of a refresh rotation attempt inside one unit of work."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()
    REVOKED = auto()


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for an active refresh token.

    :ivar id: Bearer value and primary key.
    :ivar user_id: Owner user id.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar created_at: Issue instant (UTC).
    """

    id: str
    user_id: str
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` once ``now`` has reached the expiry instant."""
        return self.expires_at <= now


class RefreshTokenStore(Protocol):
    """
    Persistence port for active refresh tokens.

    Every call participates in the caller's transaction; the store never
    commits on its own.
    """

    def find_by_id(self, token_id: str, *, for_update: bool = False) -> RefreshTokenRecord | None:
        """
        Fetch a token by id.

        :param for_update: Lock the row until the transaction ends (when supported).
        """
        ...

    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord: ...

    def delete_by_id(self, token_id: str) -> bool:
        """
        Delete a token if it still exists.

        :returns: ``False`` when no row was affected (already consumed).
        """
        ...

    def delete_all_by_user(self, user_id: str) -> int:
        """
        Delete every active token of a user.

        :returns: Number of tokens removed.
        """
        ...


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """Dictionary-backed refresh token store for unit tests."""

    def __init__(self, rows: dict[str, RefreshTokenRecord] | None = None) -> None:
        self.rows: dict[str, RefreshTokenRecord] = rows if rows is not None else {}

    def find_by_id(self, token_id: str, *, for_update: bool = False) -> RefreshTokenRecord | None:
        # Row locks are provided by the in-memory transaction runner
        return self.rows.get(token_id)

    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        if record.id in self.rows:
            raise DuplicateRecordError("RefreshToken", "id")
        self.rows[record.id] = record
        return record

    def delete_by_id(self, token_id: str) -> bool:
        return self.rows.pop(token_id, None) is not None

    def delete_all_by_user(self, user_id: str) -> int:
        doomed = [k for k, v in self.rows.items() if v.user_id == user_id]
        for k in doomed:
            del self.rows[k]
        return len(doomed)

    def list_by_user(self, user_id: str) -> list[RefreshTokenRecord]:
        """Return the user's active tokens (test inspection helper)."""
        return [v for v in self.rows.values() if v.user_id == user_id]
