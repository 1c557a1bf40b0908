"""pycontactimage - Keep a contact-card image in sync with the latest glucose reading."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pycontactimage")
except PackageNotFoundError:
    __version__ = "0+local"
from pycontactimage.config import ContactImageConfig
from pycontactimage.debounce import Debouncer
from pycontactimage.exceptions import (
    ContactImageConfigError,
    ContactImageError,
    DuplicateRecordError,
    RecordCommunicationError,
    RecordDataAccessError,
    RecordPermissionDeniedError,
    RecordStoreError,
)
from pycontactimage.manager import ContactImageManager
from pycontactimage.models import (
    DisplayPayload,
    ManagedRecord,
    RangeDescription,
    RangeThresholds,
    Reading,
    RecordOperation,
    TrendArrow,
)
from pycontactimage.render import Renderer, SvgRenderer
from pycontactimage.scheduler import LoopScheduler, Scheduler, TimerHandle
from pycontactimage.settings import (
    WATCHED_KEYS,
    ContactImageSettings,
    InMemorySettingsStore,
    KeepAliveMode,
    SettingsChange,
    SettingsKey,
    SettingsStore,
)
from pycontactimage.stores import InMemoryReadingStore, InMemoryRecordStore, ReadingStore, RecordStore
from pycontactimage.watchdog import Watchdog, WatchdogState

__all__ = [
    "__version__",
    "WATCHED_KEYS",
    "ContactImageConfig",
    "ContactImageConfigError",
    "ContactImageError",
    "ContactImageManager",
    "ContactImageSettings",
    "Debouncer",
    "DisplayPayload",
    "DuplicateRecordError",
    "InMemoryReadingStore",
    "InMemoryRecordStore",
    "InMemorySettingsStore",
    "KeepAliveMode",
    "LoopScheduler",
    "ManagedRecord",
    "RangeDescription",
    "RangeThresholds",
    "Reading",
    "ReadingStore",
    "RecordCommunicationError",
    "RecordDataAccessError",
    "RecordOperation",
    "RecordPermissionDeniedError",
    "RecordStore",
    "RecordStoreError",
    "Renderer",
    "Scheduler",
    "SettingsChange",
    "SettingsKey",
    "SettingsStore",
    "SvgRenderer",
    "TimerHandle",
    "Watchdog",
    "WatchdogState",
]
