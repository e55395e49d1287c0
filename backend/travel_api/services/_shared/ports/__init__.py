"""
travel_api.services._shared.ports
=================================

Collection of *ports* (hexagonal interfaces) that define the contracts
the authentication service depends on.

Modules
-------
- :mod:`user_store`, :mod:`refresh_token_store`, :mod:`revoked_token_store`:
    Persistence contracts, their read-models and in-memory implementations.

- :mod:`transaction`:
    Defines :class:`~.TransactionRunner` and :class:`~.AuthUnitOfWork`.

- :mod:`token_signer`:
    Defines :class:`~.TokenSigner`, the abstraction for access token signing.

- :mod:`password_hasher`, :mod:`clock`, :mod:`identifiers`:
    Hashing, time and identifier sources.

Design Notes
------------
All these ports follow the *Dependency Inversion Principle (DIP)* to keep
the service layer independent from implementation details.
Concrete adapters live under ``travel_api.infra``, ``travel_api.repositories``
and ``travel_api.uow``.
"""

from __future__ import annotations

from .clock import Clock, FrozenClock, SystemClock
from .identifiers import (
    IdentifierGenerator,
    SequenceGenerator,
    UrlSafeTokenGenerator,
    UUIDGenerator,
)
from .password_hasher import PasswordHasher, StubPasswordHasher
from .refresh_token_store import (
    MAX_TOKEN_ID_LENGTH,
    InMemoryRefreshTokenStore,
    RefreshTokenRecord,
    RefreshTokenStore,
    RotationResult,
)
from .revoked_token_store import (
    InMemoryRevokedTokenStore,
    RevokedTokenRecord,
    RevokedTokenStore,
)
from .token_signer import InvalidTokenError, StubTokenSigner, TokenSigner
from .transaction import AuthUnitOfWork, TransactionRunner
from .user_store import InMemoryUserStore, UserRecord, UserStore, normalize_email

__all__ = [
    "AuthUnitOfWork",
    "Clock",
    "FrozenClock",
    "IdentifierGenerator",
    "InMemoryRefreshTokenStore",
    "InMemoryRevokedTokenStore",
    "InMemoryUserStore",
    "InvalidTokenError",
    "MAX_TOKEN_ID_LENGTH",
    "PasswordHasher",
    "RefreshTokenRecord",
    "RefreshTokenStore",
    "RevokedTokenRecord",
    "RevokedTokenStore",
    "RotationResult",
    "SequenceGenerator",
    "StubPasswordHasher",
    "StubTokenSigner",
    "SystemClock",
    "TokenSigner",
    "TransactionRunner",
    "UUIDGenerator",
    "UrlSafeTokenGenerator",
    "UserRecord",
    "UserStore",
    "normalize_email",
]
