"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    Coordinates a transactional boundary for a use-case.

    Responsibilities:
    - Provide access to stores bound to the same session/transaction.
    - Commit on success, rollback on error (``BaseException`` included).

    Concrete implementations expose ``users``, ``refresh_tokens`` and
    ``revoked_tokens`` so they satisfy
    :class:`~travel_api.services._shared.ports.transaction.AuthUnitOfWork`.
    """

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...
    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...
    @abstractmethod
    def commit(self) -> None: ...
    @abstractmethod
    def rollback(self) -> None: ...
