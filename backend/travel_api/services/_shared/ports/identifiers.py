from __future__ import annotations

import secrets
import threading
from typing import Protocol
from uuid import uuid4


class IdentifierGenerator(Protocol):
    """Port producing unique opaque identifiers."""

    def new_id(self) -> str: ...


class UUIDGenerator(IdentifierGenerator):
    """Random uuid4 strings, used for user ids."""

    def new_id(self) -> str:
        return str(uuid4())


class UrlSafeTokenGenerator(IdentifierGenerator):
    """
    Unguessable base64url identifiers, used for refresh tokens.

    :param nbytes: Random bytes drawn from :mod:`secrets` (32 → 43 chars).
    :type nbytes: int
    """

    def __init__(self, nbytes: int = 32) -> None:
        if nbytes < 16:
            raise ValueError("nbytes must be at least 16")
        self.nbytes = nbytes

    def new_id(self) -> str:
        return secrets.token_urlsafe(self.nbytes)


class SequenceGenerator(IdentifierGenerator):
    """Deterministic ``<prefix>-<n>`` identifiers for unit tests."""

    def __init__(self, prefix: str = "id") -> None:
        self.prefix = prefix
        self._seq = 0
        self._lock = threading.Lock()

    def new_id(self) -> str:
        with self._lock:
            self._seq += 1
            return f"{self.prefix}-{self._seq}"
