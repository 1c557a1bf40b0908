"""Display payload derived on every refresh."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pycontactimage.models.reading import Reading


class DisplayPayload(BaseModel):
    """Rendered image plus the metadata written next to it.

    ``reading`` is ``None`` for the empty payload produced when the
    reading store has nothing to show.
    """

    model_config = ConfigDict(frozen=True)

    rendered_image: bytes
    caption: str
    is_stale: bool
    disabled: bool = False
    reading: Reading | None = None

    @property
    def has_reading(self) -> bool:
        return self.reading is not None
