from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from travel_api.services._shared.errors import DuplicateRecordError


@dataclass(frozen=True, slots=True)
class RevokedTokenRecord:
    """
    Tombstone of a consumed refresh token.

    :ivar token_id: Identifier of the consumed token.
    :ivar user_id: User that owned the token.
    :ivar expires_at: Original expiry of the token.
    :ivar revoked_at: When the token was consumed.
    """

    token_id: str
    user_id: str
    expires_at: datetime
    revoked_at: datetime


class RevokedTokenStore(Protocol):
    """Persistence port for refresh token tombstones (append-only)."""

    def exists(self, token_id: str) -> bool: ...

    def find_by_id(self, token_id: str) -> RevokedTokenRecord | None: ...

    def create(self, record: RevokedTokenRecord) -> RevokedTokenRecord:
        """
        Persist a tombstone.

        :raises DuplicateRecordError: When the token is already tombstoned.
        """
        ...


class InMemoryRevokedTokenStore(RevokedTokenStore):
    """Dictionary-backed tombstone store for unit tests."""

    def __init__(self, rows: dict[str, RevokedTokenRecord] | None = None) -> None:
        self.rows: dict[str, RevokedTokenRecord] = rows if rows is not None else {}

    def exists(self, token_id: str) -> bool:
        return token_id in self.rows

    def find_by_id(self, token_id: str) -> RevokedTokenRecord | None:
        return self.rows.get(token_id)

    def create(self, record: RevokedTokenRecord) -> RevokedTokenRecord:
        if record.token_id in self.rows:
            raise DuplicateRecordError("RevokedToken", "token_id")
        self.rows[record.token_id] = record
        return record
