from __future__ import annotations

import hmac
from typing import Protocol


class PasswordHasher(Protocol):
    """Port for one-way password hashing and verification."""

    def hash(self, raw: str) -> str: ...

    def verify(self, password_hash: str, raw: str) -> bool: ...


class StubPasswordHasher(PasswordHasher):
    """Cheap reversible-looking hasher for unit tests (never use in production)."""

    PREFIX = "stub$"

    def hash(self, raw: str) -> str:
        return f"{self.PREFIX}{raw}"

    def verify(self, password_hash: str, raw: str) -> bool:
        return hmac.compare_digest(password_hash, self.hash(raw))
