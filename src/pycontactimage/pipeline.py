"""Render the latest reading and write it to the managed record.

One pipeline run reads the settings snapshot and the newest readings,
renders a :class:`DisplayPayload`, then either updates the managed
record in place or creates it. Record-store failures are categorised,
logged and swallowed; a permission denial also switches the feature off.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime

from pycontactimage._redact import redact_record
from pycontactimage.config import ContactImageConfig
from pycontactimage.exceptions import (
    DuplicateRecordError,
    RecordCommunicationError,
    RecordDataAccessError,
    RecordPermissionDeniedError,
    RecordStoreError,
)
from pycontactimage.models.payload import DisplayPayload
from pycontactimage.models.reading import (
    RangeDescription,
    RangeThresholds,
    Reading,
    TrendArrow,
    format_value,
    unit_label,
)
from pycontactimage.models.record import ManagedRecord, RecordOperation
from pycontactimage.render import Renderer
from pycontactimage.scheduler import Scheduler
from pycontactimage.settings import ContactImageSettings, SettingsKey, SettingsStore
from pycontactimage.stores import ReadingStore, RecordStore

_logger = logging.getLogger(__name__)


def is_up_to_date(reading: Reading, now: datetime, freshness_window: float) -> bool:
    return reading.age_seconds(now) < freshness_window


def describe_store_error(exc: RecordStoreError) -> str:
    """Short category used in failure logs."""
    if isinstance(exc, RecordPermissionDeniedError):
        return "Authorization denied"
    if isinstance(exc, RecordCommunicationError):
        return "Communication error"
    if isinstance(exc, DuplicateRecordError):
        return "Record already exists"
    if isinstance(exc, RecordDataAccessError):
        return "Data access error"
    if exc.code is None:
        return "no details"
    return f"Code {exc.code}"


def build_label(settings: ContactImageSettings, now: datetime) -> str:
    """Organisation line: data source plus the local time of the update."""
    if settings.is_master:
        source = settings.active_sensor_description or "Updated"
    else:
        source = settings.follower_data_source
    return f"{source}: {now.astimezone():%H:%M}"


def build_note(record_name: str, app_version: str, now: datetime) -> str:
    version = f" v{app_version}" if app_version else ""
    return f"Created by {record_name}{version} - {now.astimezone():%d %b %Y %H:%M}"


def build_payload(
    readings: Sequence[Reading],
    settings: ContactImageSettings,
    renderer: Renderer,
    *,
    now: datetime,
    freshness_window: float,
    thresholds: RangeThresholds | None = None,
) -> DisplayPayload:
    """Render the newest of *readings*, or the empty image if there is none."""
    disabled = settings.disabled
    caption = build_label(settings, now)

    if not readings:
        image = renderer.render(
            value=0,
            is_mgdl=settings.is_mgdl,
            trend=TrendArrow.NONE,
            range_description=RangeDescription.IN_RANGE,
            is_up_to_date=False,
            high_contrast=False,
            disabled=disabled,
        )
        return DisplayPayload(rendered_image=image, caption=caption, is_stale=True, disabled=disabled)

    latest = readings[0]
    up_to_date = is_up_to_date(latest, now, freshness_window)
    image = renderer.render(
        value=latest.value,
        is_mgdl=settings.is_mgdl,
        trend=latest.trend if settings.display_trend else TrendArrow.NONE,
        range_description=latest.range_description(thresholds),
        is_up_to_date=up_to_date,
        high_contrast=settings.high_contrast,
        disabled=disabled,
    )
    return DisplayPayload(
        rendered_image=image,
        caption=caption,
        is_stale=not up_to_date,
        disabled=disabled,
        reading=latest,
    )


class RenderSyncPipeline:
    """Render step and record-store sync for the managed record.

    Record-store access (the read-modify-write in :meth:`sync` and
    :meth:`delete_managed_record`) is serialised by one lock.
    """

    def __init__(
        self,
        config: ContactImageConfig,
        *,
        reading_store: ReadingStore,
        record_store: RecordStore,
        settings: SettingsStore,
        renderer: Renderer,
        scheduler: Scheduler,
        thresholds: RangeThresholds | None = None,
    ) -> None:
        self._config = config
        self._reading_store = reading_store
        self._record_store = record_store
        self._settings = settings
        self._renderer = renderer
        self._scheduler = scheduler
        self._thresholds = thresholds
        self._store_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Render
    # ------------------------------------------------------------------

    async def ensure_authorized(self) -> bool:
        """Return whether the record store may be used.

        When access has been revoked and the feature is still enabled,
        the feature is switched off.
        """
        if await self._record_store.is_authorized():
            return True
        self._disable_feature("access to records is not authorized")
        return False

    async def render(self) -> DisplayPayload:
        settings = ContactImageSettings.from_store(self._settings)
        readings = await self._reading_store.get_recent_readings(self._config.min_reading_gap_minutes)
        return build_payload(
            readings,
            settings,
            self._renderer,
            now=self._scheduler.now(),
            freshness_window=self._config.freshness_window,
            thresholds=self._thresholds,
        )

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    async def sync(self, payload: DisplayPayload) -> RecordOperation | None:
        """Write *payload* to the managed record.

        Returns the operation that was applied, or ``None`` if the store
        rejected it.
        """
        async with self._store_lock:
            name = self._config.record_name
            try:
                existing = await self._record_store.find_by_name(name)
            except RecordStoreError as exc:
                # Without a reliable lookup an add could create a second record.
                self._handle_store_error("look up", exc)
                return None

            if existing is not None:
                if payload.reading is not None:
                    _logger.info(
                        "'%s' record found. Updating the image to %s %s",
                        name,
                        format_value(payload.reading.value, self._is_mgdl()),
                        unit_label(self._is_mgdl()),
                    )
                record = existing.model_copy(
                    update={"image_data": payload.rendered_image, "label": payload.caption},
                )
                operation = RecordOperation.UPDATE
            else:
                _logger.info("No existing record found. Creating a new record called '%s'", name)
                record = ManagedRecord(
                    given_name=name,
                    image_data=payload.rendered_image,
                    label=payload.caption,
                    note=build_note(name, self._config.app_version, self._scheduler.now()),
                )
                operation = RecordOperation.ADD

            if await self._submit(operation, record):
                return operation
            return None

    async def delete_managed_record(self) -> bool:
        """Delete the managed record if it exists.

        Returns ``True`` only when a delete was submitted and accepted.
        """
        async with self._store_lock:
            try:
                existing = await self._record_store.find_by_name(self._config.record_name)
            except RecordStoreError as exc:
                self._handle_store_error("look up", exc)
                return False
            if existing is None:
                return False
            _logger.info("Existing record found, deleting it")
            return await self._submit(RecordOperation.DELETE, existing)

    async def _submit(self, operation: RecordOperation, record: ManagedRecord) -> bool:
        try:
            await self._record_store.submit(operation, record)
        except RecordStoreError as exc:
            self._handle_store_error(operation.value, exc)
            return False
        _logger.debug("Submitted %s: %s", operation.value, redact_record(record))
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _is_mgdl(self) -> bool:
        return ContactImageSettings.from_store(self._settings).is_mgdl

    def _handle_store_error(self, action: str, exc: RecordStoreError) -> None:
        _logger.error("Failed to %s the record - %s: %s", action, describe_store_error(exc), exc)
        if isinstance(exc, RecordPermissionDeniedError):
            self._disable_feature(f"{action} was denied")

    def _disable_feature(self, reason: str) -> None:
        if not self._settings.get(SettingsKey.ENABLE_CONTACT_IMAGE):
            return
        _logger.info("Disabling the contact image: %s", reason)
        self._settings.set(SettingsKey.ENABLE_CONTACT_IMAGE, False)
