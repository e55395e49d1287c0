"""Unit of Work abstractions and concrete implementations.

This package re-exports the SQLAlchemy-backed unit of work and transaction
runner used by the application, the in-memory pair used by unit tests, and
the abstract contract both follow.
"""

from .base import UnitOfWork
from .memory import InMemoryTransactionRunner, InMemoryUnitOfWork
from .sqlalchemy_uow import SQLAlchemyTransactionRunner, SQLAlchemyUnitOfWork

__all__ = [
    "UnitOfWork",
    "InMemoryTransactionRunner",
    "InMemoryUnitOfWork",
    "SQLAlchemyTransactionRunner",
    "SQLAlchemyUnitOfWork",
]
