"""Cancellable timers on a single event loop.

Both the debouncer and the watchdog hold at most one :class:`TimerHandle`
and replace it with cancel-then-reschedule.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def now(self) -> datetime: ...

    def schedule_after(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run *callback* once after *delay* seconds, unless cancelled first."""
        ...


class LoopScheduler:
    """:class:`Scheduler` backed by ``loop.call_later``.

    The loop is resolved lazily so the scheduler can be created before
    the loop runs; all calls must then happen on that loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def now(self) -> datetime:
        return datetime.now(UTC)

    def schedule_after(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(delay, 0.0), callback)
