"""Settings keys, change events and the settings store.

The host application owns the settings. This module describes the
subset the contact image depends on, a typed snapshot of it, and an
in-memory store that pushes a :class:`SettingsChange` to subscribers on
every write.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

_logger = logging.getLogger(__name__)


class SettingsKey(StrEnum):
    ENABLE_CONTACT_IMAGE = "enableContactImage"
    DISPLAY_TREND = "displayTrendInContactImage"
    USE_HIGH_CONTRAST = "useHighContrastContactImage"
    UNIT_IS_MGDL = "bloodGlucoseUnitIsMgDl"
    IS_MASTER = "isMaster"
    FOLLOWER_KEEP_ALIVE = "followerBackgroundKeepAliveType"
    ACTIVE_SENSOR_DESCRIPTION = "activeSensorDescription"
    FOLLOWER_DATA_SOURCE = "followerDataSourceDescription"


class KeepAliveMode(StrEnum):
    """Background keep-alive strategy used while following."""

    DISABLED = "disabled"
    NORMAL = "normal"
    AGGRESSIVE = "aggressive"
    HEARTBEAT = "heartbeat"


#: Keys whose change must refresh the contact image.
WATCHED_KEYS: frozenset[SettingsKey] = frozenset(
    {
        SettingsKey.ENABLE_CONTACT_IMAGE,
        SettingsKey.DISPLAY_TREND,
        SettingsKey.USE_HIGH_CONTRAST,
        SettingsKey.UNIT_IS_MGDL,
        SettingsKey.IS_MASTER,
        SettingsKey.FOLLOWER_KEEP_ALIVE,
    }
)

DEFAULTS: dict[SettingsKey, Any] = {
    SettingsKey.ENABLE_CONTACT_IMAGE: False,
    SettingsKey.DISPLAY_TREND: False,
    SettingsKey.USE_HIGH_CONTRAST: False,
    SettingsKey.UNIT_IS_MGDL: True,
    SettingsKey.IS_MASTER: True,
    SettingsKey.FOLLOWER_KEEP_ALIVE: KeepAliveMode.NORMAL,
    SettingsKey.ACTIVE_SENSOR_DESCRIPTION: None,
    SettingsKey.FOLLOWER_DATA_SOURCE: "Follower",
}


class SettingsChange(BaseModel):
    """A single settings write, as pushed to subscribers."""

    model_config = ConfigDict(frozen=True)

    key: SettingsKey
    old_value: Any = None
    new_value: Any = None
    changed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


SettingsCallback = Callable[[SettingsChange], None]


class SettingsStore(Protocol):
    def get(self, key: SettingsKey) -> Any: ...

    def set(self, key: SettingsKey, value: Any) -> None: ...

    def subscribe(self, keys: Iterable[SettingsKey], callback: SettingsCallback) -> Callable[[], None]:
        """Register *callback* for writes to *keys*; returns an unsubscribe function."""
        ...


class InMemorySettingsStore:
    """Dictionary-backed :class:`SettingsStore`.

    Every ``set`` notifies the subscribers of that key, even when the
    value is unchanged.
    """

    def __init__(self, values: dict[SettingsKey, Any] | None = None) -> None:
        self._values: dict[SettingsKey, Any] = dict(DEFAULTS)
        if values:
            self._values.update(values)
        self._subscribers: list[tuple[frozenset[SettingsKey], SettingsCallback]] = []

    def get(self, key: SettingsKey) -> Any:
        return self._values.get(key)

    def set(self, key: SettingsKey, value: Any) -> None:
        old_value = self._values.get(key)
        self._values[key] = value
        change = SettingsChange(key=key, old_value=old_value, new_value=value)
        for keys, callback in list(self._subscribers):
            if key not in keys:
                continue
            try:
                callback(change)
            except Exception:
                _logger.exception("Settings subscriber failed for %s", key)

    def subscribe(self, keys: Iterable[SettingsKey], callback: SettingsCallback) -> Callable[[], None]:
        entry = (frozenset(keys), callback)
        self._subscribers.append(entry)

        def _unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


class ContactImageSettings(BaseModel):
    """Typed snapshot of the settings read by one refresh."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    display_trend: bool = False
    high_contrast: bool = False
    is_mgdl: bool = True
    is_master: bool = True
    keep_alive: KeepAliveMode = KeepAliveMode.NORMAL
    active_sensor_description: str | None = None
    follower_data_source: str = "Follower"

    @classmethod
    def from_store(cls, store: SettingsStore) -> ContactImageSettings:
        def _value(key: SettingsKey) -> Any:
            value = store.get(key)
            return DEFAULTS[key] if value is None else value

        return cls(
            enabled=bool(_value(SettingsKey.ENABLE_CONTACT_IMAGE)),
            display_trend=bool(_value(SettingsKey.DISPLAY_TREND)),
            high_contrast=bool(_value(SettingsKey.USE_HIGH_CONTRAST)),
            is_mgdl=bool(_value(SettingsKey.UNIT_IS_MGDL)),
            is_master=bool(_value(SettingsKey.IS_MASTER)),
            keep_alive=KeepAliveMode(_value(SettingsKey.FOLLOWER_KEEP_ALIVE)),
            active_sensor_description=store.get(SettingsKey.ACTIVE_SENSOR_DESCRIPTION),
            follower_data_source=str(_value(SettingsKey.FOLLOWER_DATA_SOURCE)),
        )

    @property
    def disabled(self) -> bool:
        """True when the image must show "OFF".

        A follower without background keep-alive cannot refresh in the
        background, so its image would always be out of date.
        """
        return not self.enabled or (not self.is_master and self.keep_alive == KeepAliveMode.DISABLED)
