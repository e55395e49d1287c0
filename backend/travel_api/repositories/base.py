"""Persistence-only base class shared by the SQL stores.

Repositories run inside a unit of work: they read, stage and flush, but the
transaction runner alone commits or rolls back. Rows never leave a
repository; callers receive the frozen records declared next to each port.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import exists as sql_exists
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from travel_api.core.extensions import db
from travel_api.services._shared.errors import DuplicateRecordError

E = TypeVar("E")  # mapped row type


class BaseRepository(Generic[E]):
    """Primary-key access and conflict-aware inserts for one table.

    Subclasses set ``model`` and, when the key column is not ``id``,
    ``pk_name``.

    :param session: Session of the enclosing unit of work. Defaults to the
        Flask-scoped ``db.session``.
    """

    model: type[E]
    pk_name: str = "id"

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """Session the statements of this repository run on."""
        if self._session is not None:
            return self._session
        return cast(Session, db.session)

    def _row(self, key: Any, *, lock: bool = False) -> E | None:
        """Load the row whose primary key equals ``key``.

        :param lock: Append ``FOR UPDATE``. Dialects without row locks
            (SQLite) drop the clause and rely on their writer lock.
        """
        stmt = select(self.model).where(getattr(self.model, self.pk_name) == key)
        if lock:
            stmt = stmt.with_for_update()
        return cast(E | None, self.session.execute(stmt).scalars().first())

    def _has_row(self, key: Any) -> bool:
        column = getattr(self.model, self.pk_name)
        return bool(self.session.execute(select(sql_exists().where(column == key))).scalar())

    def _insert(
        self,
        row: E,
        *,
        conflict: Callable[[IntegrityError], DuplicateRecordError | None],
    ) -> E:
        """Stage ``row`` and flush so constraint violations surface here.

        :param conflict: Maps the driver error to a :class:`DuplicateRecordError`,
            or returns ``None`` to let the original error through.
        :raises DuplicateRecordError: For uniqueness violations ``conflict`` recognises.
        """
        self.session.add(row)
        try:
            self.session.flush()
        except IntegrityError as exc:
            mapped = conflict(exc)
            if mapped is None:
                raise
            raise mapped from exc
        return row
