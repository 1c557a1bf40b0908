"""Manager configuration for pycontactimage."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pycontactimage.exceptions import ContactImageConfigError

#: Name used both to find the managed record and as its given name.
DEFAULT_RECORD_NAME = "xDrip4iO5"


def _env_float(name: str, value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ContactImageConfigError(f"{name} must be a number, got {value!r}") from exc


def _default_app_version() -> str:
    # Imported lazily: the package __init__ imports this module.
    from pycontactimage import __version__

    return __version__


@dataclasses.dataclass(frozen=True)
class ContactImageConfig:
    """Manager configuration.

    Parameters
    ----------
    record_name : str
        Well-known name of the managed record. Used as lookup predicate
        and as given name when the record is created.
    app_version : str
        Version tag written into the note of a newly created record.
    debounce_delay : float
        Minimum spacing in seconds between two refresh runs.
    watchdog_interval : float
        Seconds after a refresh with data before a fallback refresh is
        forced. Defaults to 5 minutes 15 seconds.
    freshness_window : float
        Age in seconds after which a reading is rendered as stale.
    min_reading_gap_minutes : float
        Minimum spacing between the two most recent readings requested
        from the reading store.
    """

    record_name: str = DEFAULT_RECORD_NAME
    app_version: str = dataclasses.field(default_factory=_default_app_version)
    debounce_delay: float = 3.0
    watchdog_interval: float = 5 * 60 + 15
    freshness_window: float = 7 * 60
    min_reading_gap_minutes: float = 4.0

    def __post_init__(self) -> None:
        if not self.record_name.strip():
            raise ContactImageConfigError("record_name must be non-empty")
        for field_name in ("debounce_delay", "watchdog_interval", "freshness_window"):
            if getattr(self, field_name) <= 0:
                raise ContactImageConfigError(f"{field_name} must be positive")
        if self.min_reading_gap_minutes < 0:
            raise ContactImageConfigError("min_reading_gap_minutes must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> ContactImageConfig:
        """Create configuration from environment variables.

        Reads optional ``CONTACT_IMAGE_*`` variables. Explicit keyword
        arguments override environment values.

        Raises
        ------
        ContactImageConfigError
            If a numeric variable cannot be parsed or a value is out of
            range.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        name_env = env.get("CONTACT_IMAGE_RECORD_NAME")
        if name_env is not None:
            config_kwargs["record_name"] = name_env

        version_env = env.get("CONTACT_IMAGE_APP_VERSION")
        if version_env is not None:
            config_kwargs["app_version"] = version_env

        _ENV_FLOAT_MAP = {
            "CONTACT_IMAGE_DEBOUNCE_DELAY": "debounce_delay",
            "CONTACT_IMAGE_WATCHDOG_INTERVAL": "watchdog_interval",
            "CONTACT_IMAGE_FRESHNESS_WINDOW": "freshness_window",
            "CONTACT_IMAGE_MIN_READING_GAP_MINUTES": "min_reading_gap_minutes",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_float(env_key, val)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
