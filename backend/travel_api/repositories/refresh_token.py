"""Refresh token repository implementing the :class:`RefreshTokenStore` port."""

from __future__ import annotations

from sqlalchemy import delete, select

from travel_api.models.base import ensure_utc
from travel_api.models.refresh_token import RefreshToken
from travel_api.repositories.base import BaseRepository
from travel_api.services._shared.errors import DuplicateRecordError
from travel_api.services._shared.ports.refresh_token_store import RefreshTokenRecord


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`.

    Deletes are issued as single ``DELETE`` statements so the affected row
    count tells whether a concurrent transaction consumed the token first.
    """

    model = RefreshToken

    def find_by_id(self, token_id: str, *, for_update: bool = False) -> RefreshTokenRecord | None:
        """Fetch an active token.

        :param token_id: Bearer value.
        :type token_id: str
        :param for_update: Issue ``SELECT ... FOR UPDATE`` to serialise rotations.
        :type for_update: bool
        :returns: Token record or ``None``.
        :rtype: RefreshTokenRecord | None
        """
        row = self._row(token_id, lock=for_update)
        return self._to_record(row)

    def create(self, record: RefreshTokenRecord) -> RefreshTokenRecord:
        """Insert a new token row.

        :raises DuplicateRecordError: When the id collides with an existing row.
        """
        row = RefreshToken(
            id=record.id,
            user_id=record.user_id,
            expires_at=record.expires_at,
            created_at=record.created_at,
        )
        self._insert(row, conflict=lambda _exc: DuplicateRecordError("RefreshToken", "id"))
        return record

    def delete_by_id(self, token_id: str) -> bool:
        """Delete a token; ``False`` when no row was affected."""
        stmt = delete(RefreshToken).where(RefreshToken.id == token_id)
        result = self.session.execute(stmt)
        return bool(result.rowcount)

    def delete_all_by_user(self, user_id: str) -> int:
        """Delete every active token of ``user_id`` and return how many went."""
        stmt = delete(RefreshToken).where(RefreshToken.user_id == user_id)
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)

    def list_by_user(self, user_id: str) -> list[RefreshTokenRecord]:
        """Return the user's active tokens."""
        stmt = select(RefreshToken).where(RefreshToken.user_id == user_id)
        rows = self.session.execute(stmt).scalars().all()
        return [r for r in (self._to_record(row) for row in rows) if r is not None]

    @staticmethod
    def _to_record(row: RefreshToken | None) -> RefreshTokenRecord | None:
        if row is None:
            return None
        return RefreshTokenRecord(
            id=row.id,
            user_id=row.user_id,
            expires_at=ensure_utc(row.expires_at),
            created_at=ensure_utc(row.created_at),
        )
