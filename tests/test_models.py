from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from pycontactimage.models.reading import (
    RangeDescription,
    RangeThresholds,
    Reading,
    TrendArrow,
    format_value,
    unit_label,
)
from pycontactimage.models.record import ManagedRecord


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def test_naive_timestamp_is_treated_as_utc() -> None:
    reading = Reading(value=100, timestamp=datetime(2026, 1, 1))
    assert reading.timestamp == _dt()


def test_reading_is_frozen() -> None:
    reading = Reading(value=100, timestamp=_dt())
    with pytest.raises(ValidationError):
        reading.value = 90  # type: ignore[misc]


def test_age_seconds() -> None:
    reading = Reading(value=100, timestamp=_dt())
    assert reading.age_seconds(_dt() + timedelta(minutes=2)) == 120.0


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (40, RangeDescription.URGENT),
        (55, RangeDescription.URGENT),
        (65, RangeDescription.NOT_URGENT),
        (120, RangeDescription.IN_RANGE),
        (200, RangeDescription.NOT_URGENT),
        (260, RangeDescription.URGENT),
    ],
)
def test_range_description(value: float, expected: RangeDescription) -> None:
    assert Reading(value=value, timestamp=_dt()).range_description() == expected


def test_custom_thresholds() -> None:
    thresholds = RangeThresholds(urgent_low=60, low=80, high=140, urgent_high=200)
    assert Reading(value=150, timestamp=_dt()).range_description(thresholds) == RangeDescription.NOT_URGENT


def test_thresholds_must_be_ordered() -> None:
    with pytest.raises(ValidationError):
        RangeThresholds(low=200, high=100)


def test_format_value() -> None:
    assert format_value(123.4, is_mgdl=True) == "123"
    assert format_value(180, is_mgdl=False) == "10.0"
    assert unit_label(True) == "mg/dL"
    assert unit_label(False) == "mmol/L"


def test_trend_arrow_values() -> None:
    assert TrendArrow("↗") == TrendArrow.FORTY_FIVE_UP
    assert TrendArrow.NONE == ""


def test_managed_record_copy_on_write() -> None:
    record = ManagedRecord(given_name=" xDrip4iO5 ", image_data=b"a")
    updated = record.model_copy(update={"image_data": b"b", "label": "Updated: 12:00"})

    assert record.given_name == "xDrip4iO5"
    assert record.image_data == b"a"
    assert updated.image_data == b"b"
    assert updated.identifier == record.identifier


def test_managed_record_requires_name() -> None:
    with pytest.raises(ValidationError):
        ManagedRecord(given_name="  ")
