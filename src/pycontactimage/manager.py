"""Host-facing contact image manager."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from pycontactimage.config import ContactImageConfig
from pycontactimage.debounce import Debouncer
from pycontactimage.models.payload import DisplayPayload
from pycontactimage.models.reading import RangeThresholds
from pycontactimage.pipeline import RenderSyncPipeline
from pycontactimage.render import Renderer, SvgRenderer
from pycontactimage.scheduler import LoopScheduler, Scheduler
from pycontactimage.settings import WATCHED_KEYS, SettingsChange, SettingsStore
from pycontactimage.stores import ReadingStore, RecordStore
from pycontactimage.watchdog import Watchdog, WatchdogState

_logger = logging.getLogger(__name__)


class ContactImageManager:
    """Keep the managed contact's image in step with the newest reading.

    Usage::

        async with ContactImageManager(readings, contacts, settings) as manager:
            manager.on_refresh_trigger()

    Refresh triggers (new readings, watched settings changes, watchdog
    timeouts) go through one :class:`Debouncer`. Every run cancels the
    watchdog; runs that had a reading to show re-arm it, and a run that
    fails before rendering restores a watchdog that was live.
    """

    def __init__(
        self,
        reading_store: ReadingStore,
        record_store: RecordStore,
        settings: SettingsStore,
        *,
        config: ContactImageConfig | None = None,
        renderer: Renderer | None = None,
        scheduler: Scheduler | None = None,
        thresholds: RangeThresholds | None = None,
    ) -> None:
        self._config = config or ContactImageConfig()
        self._scheduler = scheduler or LoopScheduler()
        self._pipeline = RenderSyncPipeline(
            self._config,
            reading_store=reading_store,
            record_store=record_store,
            settings=settings,
            renderer=renderer or SvgRenderer(),
            scheduler=self._scheduler,
            thresholds=thresholds,
        )
        self._debouncer = Debouncer(self._scheduler, delay=self._config.debounce_delay)
        self._watchdog = Watchdog(
            self._scheduler,
            self.on_refresh_trigger,
            interval=self._config.watchdog_interval,
        )
        self._last_payload: DisplayPayload | None = None
        self._unsubscribe: Callable[[], None] | None = settings.subscribe(WATCHED_KEYS, self._on_settings_change)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ContactImageManager:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.close()
        await self.wait_idle()

    def close(self) -> None:
        """Stop listening for settings changes and drop pending timers."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._debouncer.cancel()
        self._watchdog.cancel()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def config(self) -> ContactImageConfig:
        return self._config

    @property
    def debouncer(self) -> Debouncer:
        return self._debouncer

    @property
    def watchdog(self) -> Watchdog:
        return self._watchdog

    @property
    def last_payload(self) -> DisplayPayload | None:
        return self._last_payload

    def on_refresh_trigger(self) -> None:
        """Request a refresh; bursts are coalesced by the debouncer."""
        self._debouncer.request(self._refresh)

    def process_new_reading(self) -> None:
        """Alias of :meth:`on_refresh_trigger` for new-reading notifications."""
        self.on_refresh_trigger()

    async def delete_managed_record(self) -> bool:
        """Remove the managed record now. Not debounced, not watchdog-guarded."""
        return await self._pipeline.delete_managed_record()

    async def wait_idle(self) -> None:
        """Wait for refresh runs that have already started."""
        await self._debouncer.wait_idle()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _on_settings_change(self, change: SettingsChange) -> None:
        _logger.debug("Setting %s changed, refreshing", change.key)
        self.on_refresh_trigger()

    async def _refresh(self) -> None:
        # A watchdog that was live before this run must stay live if the run fails.
        watchdog_live = self._watchdog.state in (WatchdogState.ARMED, WatchdogState.FIRED)
        self._watchdog.cancel()

        try:
            if not await self._pipeline.ensure_authorized():
                return
            payload = await self._pipeline.render()
        except Exception:
            if watchdog_live:
                _logger.warning("Refresh failed before rendering, re-arming the watchdog")
                self._watchdog.arm()
            raise

        self._last_payload = payload

        # Only runs with a reading re-arm; with no data the watchdog stays
        # idle until the next organic trigger.
        if payload.has_reading:
            self._watchdog.arm()

        await self._pipeline.sync(payload)
