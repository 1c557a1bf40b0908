"""Contact image rendering.

The renderer is a pure function of its inputs. :class:`SvgRenderer`
produces a small square SVG document; hosts that need a raster image
can supply their own :class:`Renderer`.
"""

from __future__ import annotations

from typing import Protocol
from xml.sax.saxutils import escape

from pycontactimage.models.reading import RangeDescription, format_value

_SIZE = 256

_RANGE_COLORS: dict[RangeDescription, str] = {
    RangeDescription.IN_RANGE: "#4cd964",
    RangeDescription.NOT_URGENT: "#ffcc00",
    RangeDescription.URGENT: "#ff3b30",
}
_STALE_COLOR = "#8e8e93"
_HIGH_CONTRAST_COLOR = "#ffffff"


class Renderer(Protocol):
    def render(
        self,
        *,
        value: float,
        is_mgdl: bool,
        trend: str,
        range_description: RangeDescription,
        is_up_to_date: bool,
        high_contrast: bool,
        disabled: bool,
    ) -> bytes: ...


class SvgRenderer:
    """Render the value, its trend arrow and range colour as SVG.

    * ``disabled`` shows ``OFF``; a value of ``0`` or less shows ``---``.
    * An out-of-date value stays visible but is greyed out and struck
      through.
    * High contrast draws white on black regardless of range.
    """

    def render(
        self,
        *,
        value: float,
        is_mgdl: bool,
        trend: str,
        range_description: RangeDescription,
        is_up_to_date: bool,
        high_contrast: bool,
        disabled: bool,
    ) -> bytes:
        if disabled:
            text = "OFF"
            trend = ""
        elif value <= 0:
            text = "---"
            trend = ""
        else:
            text = format_value(value, is_mgdl)

        if disabled or not is_up_to_date:
            color = _STALE_COLOR
        elif high_contrast:
            color = _HIGH_CONTRAST_COLOR
        else:
            color = _RANGE_COLORS[range_description]

        # Shrink long mmol/L strings like "22.2" so they fit.
        font_size = 110 if len(text) <= 3 else 90
        value_y = 140 if trend else 160
        decoration = ' text-decoration="line-through"' if (not is_up_to_date and not disabled and value > 0) else ""

        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{_SIZE}" height="{_SIZE}" viewBox="0 0 {_SIZE} {_SIZE}">',
            f'<rect width="{_SIZE}" height="{_SIZE}" fill="#000000"/>',
            f'<text x="{_SIZE // 2}" y="{value_y}" font-family="Helvetica" font-weight="bold" '
            f'font-size="{font_size}" text-anchor="middle" fill="{color}"{decoration}>{escape(text)}</text>',
        ]
        if trend:
            parts.append(
                f'<text x="{_SIZE // 2}" y="225" font-family="Helvetica" font-size="72" '
                f'text-anchor="middle" fill="{color}">{escape(trend)}</text>'
            )
        parts.append("</svg>")
        return "".join(parts).encode("utf-8")
