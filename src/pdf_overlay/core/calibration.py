# SPDX-License-Identifier: Apache-2.0
"""Visual anchor calibration shared by the overlay and the compositor.

The overlay draws each element as a padded text box whose top-left corner
sits at the stored (x, y). The compositor has to burn the glyphs in where
the user saw them, so its offsets depend on the overlay's padding and on
the display scale the constants were tuned at. Both sides read the values
from one ``VisualCalibration`` instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models import TextElement


@dataclass(frozen=True)
class VisualCalibration:
    """Calibration constants tying overlay styling to PDF placement.

    Attributes:
        display_scale: Overlay zoom the offsets were tuned at.
        padding_x_px: Horizontal text-box padding in screen pixels.
        padding_y_px: Vertical text-box padding in screen pixels.
        x_offset: Horizontal correction applied when drawing (page units).
        y_offset: Vertical correction applied when drawing (page units).
        baseline_multiplier: Fraction of the font size between the stored
            top edge and the glyph baseline.
        snap_threshold: Maximum snapping distance in page units.
        drag_margin: Margin kept inside the page while dragging.
        decoration_thickness: Decoration line thickness in points.
        underline_gap: Distance of the underline below the baseline.
        line_through_ratio: Line-through height above baseline (x font size).
        overline_ratio: Overline height above baseline (x font size).
        overlay_line_height: CSS line height of the overlay box.
    """

    display_scale: float = 1.2
    padding_x_px: float = 4.0
    padding_y_px: float = 2.0
    x_offset: float = -0.4
    y_offset: float = -4.0
    baseline_multiplier: float = 0.85
    snap_threshold: float = 5.0
    drag_margin: float = 5.0
    decoration_thickness: float = 1.0
    underline_gap: float = 2.0
    line_through_ratio: float = 0.3
    overline_ratio: float = 1.0
    overlay_line_height: float = 1.2

    @property
    def snap_padding_x(self) -> float:
        """Overlay horizontal padding expressed in page units."""
        return self.padding_x_px / self.display_scale

    @property
    def snap_padding_y(self) -> float:
        """Overlay vertical padding expressed in page units."""
        return self.padding_y_px / self.display_scale

    def overlay_style(self, element: TextElement, scale: float) -> dict[str, Any]:
        """Build the CSS-like style the overlay applies to an element box.

        Args:
            element: Element being displayed.
            scale: Current overlay zoom.

        Returns:
            Mapping of CSS property names to values.
        """
        # typography imports this module
        from .typography import is_italic, resolve_decoration

        decoration = resolve_decoration(element)
        return {
            "left": element.x * scale,
            "top": element.y * scale,
            "fontFamily": element.font_family,
            "fontSize": element.font_size * scale,
            "color": element.color,
            "fontWeight": element.effective_font_weight,
            "fontStyle": "italic" if is_italic(element) else "normal",
            "textDecoration": decoration.value,
            "textTransform": element.text_transform.value,
            "textAlign": element.text_align.value,
            "letterSpacing": element.letter_spacing * scale,
            "wordSpacing": element.word_spacing * scale,
            "lineHeight": element.line_height or self.overlay_line_height,
            "opacity": element.opacity,
            "padding": f"{self.padding_y_px:g}px {self.padding_x_px:g}px",
            "whiteSpace": "nowrap",
        }


DEFAULT_CALIBRATION = VisualCalibration()
