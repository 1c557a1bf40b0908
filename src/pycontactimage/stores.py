"""Reading and record store interfaces, with in-memory implementations."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta
from typing import Protocol

from pycontactimage._redact import redact_record
from pycontactimage.exceptions import (
    DuplicateRecordError,
    RecordPermissionDeniedError,
    RecordStoreError,
)
from pycontactimage.models.reading import Reading
from pycontactimage.models.record import ManagedRecord, RecordOperation

_logger = logging.getLogger(__name__)


class ReadingStore(Protocol):
    async def get_recent_readings(self, min_gap_minutes: float) -> Sequence[Reading]:
        """Return up to two readings, newest first.

        The second reading, when present, is at least *min_gap_minutes*
        older than the first.
        """
        ...


class RecordStore(Protocol):
    async def is_authorized(self) -> bool: ...

    async def find_by_name(self, name: str) -> ManagedRecord | None: ...

    async def submit(self, operation: RecordOperation, record: ManagedRecord) -> None:
        """Apply one save operation.

        Raises
        ------
        RecordStoreError
            Or one of its subclasses when the store rejects the request.
        """
        ...


class InMemoryReadingStore:
    """List-backed :class:`ReadingStore`."""

    def __init__(self, readings: Sequence[Reading] = ()) -> None:
        self._readings: list[Reading] = sorted(readings, key=lambda r: r.timestamp, reverse=True)

    def add(self, reading: Reading) -> None:
        self._readings.append(reading)
        self._readings.sort(key=lambda r: r.timestamp, reverse=True)

    def clear(self) -> None:
        self._readings.clear()

    async def get_recent_readings(self, min_gap_minutes: float) -> Sequence[Reading]:
        if not self._readings:
            return []
        latest = self._readings[0]
        result = [latest]
        gap = timedelta(minutes=min_gap_minutes)
        for reading in self._readings[1:]:
            if latest.timestamp - reading.timestamp >= gap:
                result.append(reading)
                break
        return result


class InMemoryRecordStore:
    """Dictionary-backed :class:`RecordStore`.

    ``authorized`` can be flipped to emulate the user revoking access.
    Every accepted operation is appended to ``submitted``.
    """

    def __init__(self, records: Sequence[ManagedRecord] = (), *, authorized: bool = True) -> None:
        self._records: dict[str, ManagedRecord] = {r.identifier: r for r in records}
        self.authorized = authorized
        self.submitted: list[tuple[RecordOperation, ManagedRecord]] = []

    @property
    def records(self) -> list[ManagedRecord]:
        return list(self._records.values())

    def _require_authorized(self) -> None:
        if not self.authorized:
            raise RecordPermissionDeniedError("Access to records is not authorized", code=100)

    async def is_authorized(self) -> bool:
        return self.authorized

    async def find_by_name(self, name: str) -> ManagedRecord | None:
        self._require_authorized()
        for record in self._records.values():
            if record.given_name == name:
                return record
        return None

    async def submit(self, operation: RecordOperation, record: ManagedRecord) -> None:
        self._require_authorized()
        exists = record.identifier in self._records
        if operation == RecordOperation.ADD:
            if exists or any(r.given_name == record.given_name for r in self._records.values()):
                raise DuplicateRecordError(f"Record {record.given_name!r} already exists", code=201)
            self._records[record.identifier] = record
        elif operation == RecordOperation.UPDATE:
            if not exists:
                raise RecordStoreError(f"Record {record.identifier} does not exist", code=200)
            self._records[record.identifier] = record
        else:
            if not exists:
                raise RecordStoreError(f"Record {record.identifier} does not exist", code=200)
            del self._records[record.identifier]
        self.submitted.append((operation, record))
        _logger.debug("Applied %s: %s", operation, redact_record(record))
