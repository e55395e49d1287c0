"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginSchema,
    RefreshSchema,
    RegisterResponseSchema,
    RegisterSchema,
    TokenResponseSchema,
    WhoAmISchema,
)

__all__ = [
    "LoginSchema",
    "RefreshSchema",
    "RegisterResponseSchema",
    "RegisterSchema",
    "TokenResponseSchema",
    "WhoAmISchema",
]
