# travel_api/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import TypeVar

from travel_api.services._shared.ports.clock import Clock, SystemClock
from travel_api.services._shared.ports.transaction import AuthUnitOfWork, TransactionRunner

T = TypeVar("T")


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Run use-case steps inside a unit of work through the injected
      :class:`TransactionRunner`.
    * Provide the service-wide notion of "now" through the injected
      :class:`Clock`.
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use the runner.
    - Services hold no mutable per-request state, so one instance may serve
      concurrent requests.
    """

    def __init__(self, *, runner: TransactionRunner, clock: Clock | None = None) -> None:
        """
        Initialize the base service.

        :param runner: Executes units of work atomically.
        :type runner: TransactionRunner
        :param clock: Time source (defaults to :class:`SystemClock`).
        :type clock: Clock | None
        """
        self.runner = runner
        self.clock = clock or SystemClock()

    # -------------------------- UoW helpers ---------------------------------

    def in_transaction(self, work: Callable[[AuthUnitOfWork], T]) -> T:
        """
        Run ``work`` inside one unit of work.

        :param work: Callable receiving the bound stores.
        :returns: Whatever ``work`` returns, after commit.
        """
        return self.runner.run(work)

    def now_utc(self) -> datetime:
        """Return the current instant from the injected clock."""
        return self.clock.now()
