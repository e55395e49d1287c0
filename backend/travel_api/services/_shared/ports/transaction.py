from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, TypeVar

from .refresh_token_store import RefreshTokenStore
from .revoked_token_store import RevokedTokenStore
from .user_store import UserStore

T = TypeVar("T")


class AuthUnitOfWork(Protocol):
    """Stores bound to a single transaction."""

    users: UserStore
    refresh_tokens: RefreshTokenStore
    revoked_tokens: RevokedTokenStore


class TransactionRunner(Protocol):
    """
    Port executing a unit of work atomically.

    ``run`` commits when ``work`` returns and rolls back when it raises
    anything (``BaseException`` included). The exception is re-raised;
    storage engine failures surface as
    :class:`~travel_api.services._shared.errors.InfrastructureError`.
    """

    def run(self, work: Callable[[AuthUnitOfWork], T]) -> T: ...
