"""Self-re-arming staleness watchdog."""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from pycontactimage.scheduler import Scheduler, TimerHandle

_logger = logging.getLogger(__name__)


class WatchdogState(StrEnum):
    IDLE = "idle"
    ARMED = "armed"
    FIRED = "fired"
    CANCELLED = "cancelled"


class Watchdog:
    """Force a refresh when no new data arrived within ``interval`` seconds.

    ``arm()`` always replaces the pending timer, so at most one is
    outstanding. When it fires, ``on_timeout`` is called; the refresh it
    triggers is expected to call ``arm()`` again.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        on_timeout: Callable[[], None],
        *,
        interval: float = 5 * 60 + 15,
    ) -> None:
        self._scheduler = scheduler
        self._on_timeout = on_timeout
        self._interval = interval
        self._handle: TimerHandle | None = None
        self._state = WatchdogState.IDLE

    @property
    def state(self) -> WatchdogState:
        return self._state

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def interval(self) -> float:
        return self._interval

    def arm(self) -> None:
        self._cancel_handle()
        self._handle = self._scheduler.schedule_after(self._interval, self._fire)
        self._state = WatchdogState.ARMED

    def cancel(self) -> None:
        if self._cancel_handle():
            self._state = WatchdogState.CANCELLED

    def _cancel_handle(self) -> bool:
        handle = self._handle
        self._handle = None
        if handle is None:
            return False
        handle.cancel()
        return True

    def _fire(self) -> None:
        self._handle = None
        self._state = WatchdogState.FIRED
        _logger.warning("No updates received for more than %.0f seconds, forcing a refresh", self._interval)
        try:
            self._on_timeout()
        except Exception:
            _logger.exception("Watchdog timeout callback failed")
