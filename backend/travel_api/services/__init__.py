"""Service layer public API.

This package exposes the essential building blocks for the service layer so that
callers can import from :mod:`travel_api.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``travel_api.services._shared.base``)
    * :class:`BaseService`

- Auth service (from ``travel_api.services.auth``)
    * :class:`AuthService`
    * DTOs: :class:`RegisterIn`, :class:`RegisterOut`, :class:`LoginIn`,
      :class:`RefreshIn`, :class:`RevokeIn`, :class:`TokenPairOut`,
      :class:`UserPublicOut`, :class:`AuthTokenConfig`
"""

from __future__ import annotations

# Base primitives
from ._shared.base import BaseService

# Auth service + DTOs
from .auth.dto import (
    AuthTokenConfig,
    LoginIn,
    RefreshIn,
    RegisterIn,
    RegisterOut,
    RevokeIn,
    TokenPairOut,
    UserPublicOut,
)
from .auth.service import AuthService

__all__ = [
    # Base
    "BaseService",
    # Auth
    "AuthService",
    "AuthTokenConfig",
    "LoginIn",
    "RefreshIn",
    "RegisterIn",
    "RegisterOut",
    "RevokeIn",
    "TokenPairOut",
    "UserPublicOut",
]
