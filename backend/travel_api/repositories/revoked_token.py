"""Revoked token repository implementing the :class:`RevokedTokenStore` port."""

from __future__ import annotations

from travel_api.models.base import ensure_utc
from travel_api.models.revoked_token import RevokedToken
from travel_api.repositories.base import BaseRepository
from travel_api.services._shared.errors import DuplicateRecordError
from travel_api.services._shared.ports.revoked_token_store import RevokedTokenRecord


class RevokedTokenRepository(BaseRepository[RevokedToken]):
    """Append-only repository for refresh token tombstones."""

    model = RevokedToken

    pk_name = "token_id"

    def exists(self, token_id: str) -> bool:
        return self._has_row(token_id)

    def find_by_id(self, token_id: str) -> RevokedTokenRecord | None:
        row = self._row(token_id)
        if row is None:
            return None
        return RevokedTokenRecord(
            token_id=row.token_id,
            user_id=row.user_id,
            expires_at=ensure_utc(row.expires_at),
            revoked_at=ensure_utc(row.revoked_at),
        )

    def create(self, record: RevokedTokenRecord) -> RevokedTokenRecord:
        """Insert a tombstone.

        :raises DuplicateRecordError: When the token is already tombstoned.
        """
        row = RevokedToken(
            token_id=record.token_id,
            user_id=record.user_id,
            expires_at=record.expires_at,
            revoked_at=record.revoked_at,
        )
        self._insert(
            row, conflict=lambda _exc: DuplicateRecordError("RevokedToken", "token_id")
        )
        return record
