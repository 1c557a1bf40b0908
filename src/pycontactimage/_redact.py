"""Log-safe view of a managed record.

The image blob is reduced to its size and the note, which the user can
edit on the device, is hidden.
"""

from __future__ import annotations

from typing import Any

from pycontactimage.models.record import ManagedRecord

_MAX_LABEL = 64


def redact_record(record: ManagedRecord) -> dict[str, Any]:
    """Return the fields of *record* that are safe to put in debug logs."""
    label = record.label
    if len(label) > _MAX_LABEL:
        label = f"{label[:_MAX_LABEL]}…"
    return {
        "identifier": record.identifier,
        "given_name": record.given_name,
        "label": label,
        "image_data": f"<{len(record.image_data)} bytes>",
        "note": "<redacted>" if record.note else "",
    }
