"""
In-memory implementation of UnitOfWork and TransactionRunner.

Used by service-level unit tests. Units of work are serialised by a lock and
operate on a copy of the committed state, which replaces the committed state
only when the work returns normally.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import TypeVar

from travel_api.services._shared.ports.refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
)
from travel_api.services._shared.ports.revoked_token_store import (
    InMemoryRevokedTokenStore,
    RevokedTokenRecord,
)
from travel_api.services._shared.ports.transaction import AuthUnitOfWork
from travel_api.services._shared.ports.user_store import InMemoryUserStore, UserRecord
from travel_api.uow.base import UnitOfWork

T = TypeVar("T")


class InMemoryUnitOfWork(UnitOfWork):
    """
    Snapshot-based unit of work over plain dictionaries.

    :param users: Committed user rows.
    :param refresh_tokens: Committed refresh token rows.
    :param revoked_tokens: Committed tombstone rows.
    """

    def __init__(
        self,
        *,
        users: dict[str, UserRecord],
        refresh_tokens: dict[str, RefreshTokenRecord],
        revoked_tokens: dict[str, RevokedTokenRecord],
    ) -> None:
        self._committed = (users, refresh_tokens, revoked_tokens)
        self.users = InMemoryUserStore(dict(users))
        self.refresh_tokens = InMemoryRefreshTokenStore(dict(refresh_tokens))
        self.revoked_tokens = InMemoryRevokedTokenStore(dict(revoked_tokens))
        self.committed = False

    def __enter__(self) -> InMemoryUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    def commit(self) -> None:
        # Record values are immutable, so swapping dictionary contents is enough
        for target, source in zip(
            self._committed,
            (self.users.rows, self.refresh_tokens.rows, self.revoked_tokens.rows),
            strict=True,
        ):
            target.clear()
            target.update(source)
        self.committed = True

    def rollback(self) -> None:
        self.users.rows.clear()
        self.refresh_tokens.rows.clear()
        self.revoked_tokens.rows.clear()


class InMemoryTransactionRunner:
    """
    Serializable, all-or-nothing transaction runner over in-memory stores.

    The committed state is exposed through ``users``, ``refresh_tokens`` and
    ``revoked_tokens`` so tests can seed and inspect it directly.
    """

    def __init__(self) -> None:
        self.users: dict[str, UserRecord] = {}
        self.refresh_tokens: dict[str, RefreshTokenRecord] = {}
        self.revoked_tokens: dict[str, RevokedTokenRecord] = {}
        self._lock = threading.RLock()
        self.commits = 0
        self.rollbacks = 0

    def run(self, work: Callable[[AuthUnitOfWork], T]) -> T:
        with self._lock:
            uow = InMemoryUnitOfWork(
                users=self.users,
                refresh_tokens=self.refresh_tokens,
                revoked_tokens=self.revoked_tokens,
            )
            try:
                with uow:
                    result = work(uow)
            except BaseException:
                self.rollbacks += 1
                raise
            self.commits += 1
            return result
