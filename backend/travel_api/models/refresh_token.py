"""Refresh token model: one row per issued, not yet consumed refresh token."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from travel_api.core.extensions import db

from .base import ID_LENGTH, StringPKMixin


class RefreshToken(StringPKMixin, db.Model):
    """
    Active refresh token.

    The primary key *is* the bearer value handed to the client. Existence of a
    row means the token was issued and has not been consumed yet; rotation and
    logout delete it in the same transaction that tombstones it.

    Fields
    ------
    id : str
        Bearer value (32 random bytes, base64url without padding).
    user_id : str
        Owning user.
    expires_at : datetime
        Absolute expiry (UTC).
    created_at : datetime
        Issue time (UTC).
    """

    __tablename__ = "refresh_tokens"

    user_id: Mapped[str] = mapped_column(
        String(ID_LENGTH), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_refresh_tokens_user_id", "user_id"),)

    def __repr__(self) -> str:
        # Never render the bearer value
        return f"<RefreshToken user_id={self.user_id} expires_at={self.expires_at}>"
