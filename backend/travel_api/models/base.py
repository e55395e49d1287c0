"""Reusable SQLAlchemy mixins shared by domain models (typed 2.0)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

# Opaque identifiers (uuid4 strings, base64url refresh ids) fit in 64 chars
ID_LENGTH = 64


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as a timezone-aware UTC datetime.

    SQLite drops the offset of ``DateTime(timezone=True)`` columns, so values
    read back are naive; they are stored as UTC and re-tagged here.

    :param value: Datetime loaded from or bound to the database.
    :type value: datetime
    :returns: Aware UTC datetime.
    :rtype: datetime
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class TimestampMixin:
    """Provide ``created_at`` and ``updated_at`` timestamp columns.

    Attributes
    ----------
    created_at:
        Timezone-aware timestamp. Services stamp it from their clock; the
        database default only covers rows inserted outside the service layer.
    updated_at:
        Timezone-aware timestamp refreshed by the database on update.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class StringPKMixin:
    """Expose an opaque string primary key column named ``id``.

    Attributes
    ----------
    id:
        Identifier allocated by the application (never by the database).
    """

    id: Mapped[str] = mapped_column(String(ID_LENGTH), primary_key=True)


class ReprMixin:
    """Provide a concise ``__repr__`` including the class name and id."""

    def __repr__(self) -> str:
        """Return a short and useful string representation.

        :returns: Debug-friendly ``<ClassName id=...>``.
        :rtype: str
        """
        cls = self.__class__.__name__
        key = getattr(self, "id", None) or getattr(self, "token_id", None)
        return f"<{cls} id={key}>"
