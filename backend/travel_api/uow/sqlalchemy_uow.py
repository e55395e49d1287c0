"""
Database-backed transaction runner: the three SQL stores over one session.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from travel_api.core.extensions import db
from travel_api.repositories import (
    RefreshTokenRepository,
    RevokedTokenRepository,
    UserRepository,
)
from travel_api.services._shared.errors import InfrastructureError
from travel_api.services._shared.ports.transaction import AuthUnitOfWork
from travel_api.uow.base import UnitOfWork

T = TypeVar("T")

log = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """
    User, refresh-token and tombstone stores bound to a single session, so a
    rotation commits or disappears as a whole.

    :param session: Explicit session; defaults to the Flask-scoped ``db.session``.
    """

    def __init__(self, session: Session | None = None) -> None:
        self.session: Session = session if session is not None else db.session
        self.users = UserRepository(session=self.session)
        self.refresh_tokens = RefreshTokenRepository(session=self.session)
        self.revoked_tokens = RevokedTokenRepository(session=self.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # The session begins lazily on its first statement
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except BaseException:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyTransactionRunner:
    """
    Run a unit of work inside one database transaction.

    :param uow_factory: Builds a fresh :class:`SQLAlchemyUnitOfWork` per call.
    :type uow_factory: Callable[[], SQLAlchemyUnitOfWork]

    A normal return commits and any exception rolls back. Driver errors,
    a failed commit included, surface as :class:`InfrastructureError`; other
    exceptions propagate unchanged. Deadlocks are not retried.
    """

    def __init__(self, uow_factory: Callable[[], SQLAlchemyUnitOfWork] | None = None) -> None:
        self.uow_factory = uow_factory or SQLAlchemyUnitOfWork

    def run(self, work: Callable[[AuthUnitOfWork], T]) -> T:
        try:
            with self.uow_factory() as uow:
                return work(uow)
        except SQLAlchemyError as exc:
            # Only the type: driver messages may echo statement parameters
            log.error("transaction.failed", extra={"outcome": type(exc).__name__})
            raise InfrastructureError("Database operation failed") from exc
