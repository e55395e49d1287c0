"""Revoked token model: permanent tombstones of consumed refresh tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from travel_api.core.extensions import db

from .base import ID_LENGTH


class RevokedToken(db.Model):
    """
    Tombstone for a refresh token that was rotated or logged out.

    Tombstones are never deleted by the application. They keep the owning user
    so a replayed token can be traced back to its user after the refresh row
    itself is gone.

    Fields
    ------
    token_id : str
        Identifier of the consumed refresh token (primary key).
    user_id : str
        User that owned the token.
    expires_at : datetime
        Original expiry of the consumed token.
    revoked_at : datetime
        When the tombstone was written.
    """

    __tablename__ = "revoked_tokens"

    token_id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(ID_LENGTH), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    revoked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_revoked_tokens_user_id", "user_id"),)

    def __repr__(self) -> str:
        return f"<RevokedToken user_id={self.user_id} revoked_at={self.revoked_at}>"
