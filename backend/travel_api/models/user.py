"""Account table backing the :class:`~travel_api.services._shared.ports.UserStore` port."""

from __future__ import annotations

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from travel_api.core.extensions import db

from .base import ReprMixin, StringPKMixin, TimestampMixin


class User(StringPKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Registered account. Inserted once by registration, then only read.

    Fields
    ------
    id : str
        uuid4 string chosen by the service.
    email : str
        Login identifier, lowercased and trimmed.
    username : str
        Display handle, trimmed; compared exactly.
    password_hash : str
        Output of the configured password hasher; the raw password is never stored.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # The unique constraints double as the lookup indexes
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
    )

    @validates("email", "username")
    def _trim_identity(self, key: str, value: str) -> str:
        """
        Canonicalise identity columns on assignment.

        :raises ValueError: If the value is not a string or is blank.
        """
        cleaned = value.strip() if isinstance(value, str) else ""
        if not cleaned:
            raise ValueError(f"{key.capitalize()} is required.")
        return cleaned.lower() if key == "email" else cleaned
