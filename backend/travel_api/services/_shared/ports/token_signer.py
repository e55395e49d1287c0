from __future__ import annotations

import threading
from datetime import datetime
from typing import Protocol

from .clock import Clock, SystemClock


class InvalidTokenError(Exception):
    """Raised by a :class:`TokenSigner` for any token it refuses to accept.

    Expired, malformed, tampered and foreign tokens are not distinguished.
    """


class TokenSigner(Protocol):
    """Port for issuing and verifying self-contained access tokens."""

    def sign(self, user_id: str, expires_at: datetime) -> str:
        """Return a signed token whose subject is ``user_id``."""
        ...

    def verify(self, token: str) -> str:
        """
        Return the subject of a valid token.

        :raises InvalidTokenError: On any verification failure.
        """
        ...


class StubTokenSigner(TokenSigner):
    """Deterministic signer used in unit tests.

    Tokens look like ``access.<user_id>.<n>`` and are only valid when issued
    by the same instance.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock or SystemClock()
        self._seq = 0
        self._issued: dict[str, tuple[str, datetime]] = {}
        self._lock = threading.Lock()

    def sign(self, user_id: str, expires_at: datetime) -> str:
        with self._lock:
            self._seq += 1
            token = f"access.{user_id}.{self._seq}"
            self._issued[token] = (user_id, expires_at)
            return token

    def verify(self, token: str) -> str:
        entry = self._issued.get(token)
        if entry is None:
            raise InvalidTokenError("unknown token")
        user_id, expires_at = entry
        if expires_at <= self.clock.now():
            raise InvalidTokenError("token expired")
        return user_id
