"""Data models for pycontactimage."""

from pycontactimage.models.payload import DisplayPayload
from pycontactimage.models.reading import (
    MGDL_TO_MMOL,
    RangeDescription,
    RangeThresholds,
    Reading,
    TrendArrow,
    format_value,
    unit_label,
)
from pycontactimage.models.record import ManagedRecord, RecordOperation

__all__ = [
    "MGDL_TO_MMOL",
    "DisplayPayload",
    "ManagedRecord",
    "RangeDescription",
    "RangeThresholds",
    "Reading",
    "RecordOperation",
    "TrendArrow",
    "format_value",
    "unit_label",
]
