"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from travel_api.repositories.base import BaseRepository
from travel_api.repositories.refresh_token import RefreshTokenRepository
from travel_api.repositories.revoked_token import RevokedTokenRepository
from travel_api.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    # Domain
    "RefreshTokenRepository",
    "RevokedTokenRepository",
    "UserRepository",
]
