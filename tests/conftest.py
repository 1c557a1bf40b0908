from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from pycontactimage.settings import InMemorySettingsStore, SettingsKey

START = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


@dataclass
class _ManualTimer:
    due: datetime
    seq: int
    callback: Callable[[], None] = field(repr=False)
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by ``advance()`` instead of the wall clock.

    Fired callbacks run synchronously inside ``advance()``; tasks they
    spawn run when the test next awaits.
    """

    def __init__(self, start: datetime = START) -> None:
        self._now = start
        self._seq = 0
        self.timers: list[_ManualTimer] = []

    def now(self) -> datetime:
        return self._now

    def schedule_after(self, delay: float, callback: Callable[[], None]) -> _ManualTimer:
        self._seq += 1
        timer = _ManualTimer(due=self._now + timedelta(seconds=max(delay, 0.0)), seq=self._seq, callback=callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[_ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds: float) -> None:
        target = self._now + timedelta(seconds=seconds)
        while True:
            due = [t for t in self.pending if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self._now = max(self._now, timer.due)
            timer.fired = True
            timer.callback()
        self._now = target


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def settings() -> InMemorySettingsStore:
    return InMemorySettingsStore(
        {
            SettingsKey.ENABLE_CONTACT_IMAGE: True,
            SettingsKey.DISPLAY_TREND: True,
            SettingsKey.ACTIVE_SENSOR_DESCRIPTION: "Dexcom G7",
        }
    )
