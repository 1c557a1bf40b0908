"""Debouncer with a minimum spacing between runs."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from pycontactimage.scheduler import Scheduler, TimerHandle

_logger = logging.getLogger(__name__)

Action = Callable[[], Awaitable[Any]]


class Debouncer:
    """Coalesce rapid requests into single runs spaced at least ``delay`` apart.

    The first request ever runs immediately. Later requests run at
    ``last_executed_at + delay``, or immediately if that moment has
    passed. Each request replaces the pending one; a run already in
    progress is never cancelled, and runs never overlap.
    """

    def __init__(self, scheduler: Scheduler, delay: float = 3.0) -> None:
        self._scheduler = scheduler
        self._delay = delay
        self._pending: TimerHandle | None = None
        self._last_executed_at: datetime | None = None
        self._run_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._pending is not None

    @property
    def last_executed_at(self) -> datetime | None:
        return self._last_executed_at

    def next_delay(self) -> float:
        """Seconds a request made now would wait before running."""
        if self._last_executed_at is None:
            return 0.0
        since_last = (self._scheduler.now() - self._last_executed_at).total_seconds()
        if since_last > self._delay:
            return 0.0
        return self._delay - since_last

    def request(self, action: Action) -> None:
        """Schedule *action*, replacing any run that has not started yet."""
        self.cancel()
        delay = self.next_delay()
        _logger.debug("Debounced run scheduled in %.2fs", delay)
        self._pending = self._scheduler.schedule_after(delay, lambda: self._fire(action))

    def cancel(self) -> None:
        """Drop the pending run, if any."""
        pending = self._pending
        self._pending = None
        if pending is not None:
            pending.cancel()

    async def wait_idle(self) -> None:
        """Wait until every run started so far has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _fire(self, action: Action) -> None:
        self._pending = None
        self._last_executed_at = self._scheduler.now()
        task = asyncio.get_running_loop().create_task(self._run(action))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, action: Action) -> None:
        async with self._run_lock:
            try:
                await action()
            except Exception:
                _logger.exception("Debounced action failed")
