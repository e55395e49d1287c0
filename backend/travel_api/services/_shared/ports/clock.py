from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Port returning the current instant as an aware UTC datetime."""

    def now(self) -> datetime: ...


class SystemClock(Clock):
    """Wall clock backed by :func:`datetime.now`."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FrozenClock(Clock):
    """
    Manually driven clock for unit tests.

    :param start: Initial instant; naive values are interpreted as UTC.
    :type start: datetime | None
    """

    def __init__(self, start: datetime | None = None) -> None:
        start = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
        self._now = start if start.tzinfo else start.replace(tzinfo=UTC)
        self._lock = threading.Lock()

    def now(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward and return the new instant."""
        with self._lock:
            self._now = self._now + delta
            return self._now

    def set(self, instant: datetime) -> None:
        with self._lock:
            self._now = instant if instant.tzinfo else instant.replace(tzinfo=UTC)
