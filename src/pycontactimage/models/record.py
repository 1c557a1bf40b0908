"""Managed contact record and the operations submitted for it."""

from __future__ import annotations

import uuid
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecordOperation(StrEnum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


class ManagedRecord(BaseModel):
    """Snapshot of the contact this library owns.

    Records are frozen; an update is built with ``model_copy(update=...)``
    and submitted back to the store.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(default_factory=lambda: uuid.uuid4().hex)
    given_name: str
    image_data: bytes = b""
    label: str = Field(default="", description="Shown as the organisation line")
    note: str = ""

    @field_validator("given_name")
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        name = value.strip()
        if not name:
            raise ValueError("given_name must be non-empty")
        return name
