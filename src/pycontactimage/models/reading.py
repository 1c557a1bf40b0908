"""Glucose reading model and value helpers."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

#: mg/dL to mmol/L conversion factor.
MGDL_TO_MMOL = 0.0555


class TrendArrow(StrEnum):
    """Slope arrow shown next to the value."""

    DOUBLE_UP = "↑↑"
    SINGLE_UP = "↑"
    FORTY_FIVE_UP = "↗"
    FLAT = "→"
    FORTY_FIVE_DOWN = "↘"
    SINGLE_DOWN = "↓"
    DOUBLE_DOWN = "↓↓"
    NONE = ""


class RangeDescription(StrEnum):
    IN_RANGE = "inRange"
    NOT_URGENT = "notUrgent"
    URGENT = "urgent"


class RangeThresholds(BaseModel):
    """Range boundaries in mg/dL."""

    model_config = ConfigDict(frozen=True)

    urgent_low: float = 55.0
    low: float = 70.0
    high: float = 180.0
    urgent_high: float = 250.0

    @model_validator(mode="after")
    def _check_order(self) -> RangeThresholds:
        if not self.urgent_low <= self.low < self.high <= self.urgent_high:
            raise ValueError("thresholds must satisfy urgent_low <= low < high <= urgent_high")
        return self


class Reading(BaseModel):
    """A single calculated glucose value.

    Readings are produced by the reading store and never modified here.
    """

    model_config = ConfigDict(frozen=True)

    value: float = Field(..., description="Calculated value in mg/dL")
    timestamp: datetime
    trend: TrendArrow = TrendArrow.NONE

    @field_validator("timestamp")
    @classmethod
    def _ensure_tz_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    def age_seconds(self, now: datetime) -> float:
        return abs((now - self.timestamp).total_seconds())

    def range_description(self, thresholds: RangeThresholds | None = None) -> RangeDescription:
        t = thresholds or RangeThresholds()
        if self.value <= t.urgent_low or self.value >= t.urgent_high:
            return RangeDescription.URGENT
        if self.value <= t.low or self.value >= t.high:
            return RangeDescription.NOT_URGENT
        return RangeDescription.IN_RANGE


def format_value(mgdl: float, is_mgdl: bool) -> str:
    """Format a mg/dL value in the display unit.

    mg/dL is shown as a whole number, mmol/L with one decimal.
    """
    if is_mgdl:
        return f"{mgdl:.0f}"
    return f"{mgdl * MGDL_TO_MMOL:.1f}"


def unit_label(is_mgdl: bool) -> str:
    return "mg/dL" if is_mgdl else "mmol/L"
