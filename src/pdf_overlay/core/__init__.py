# SPDX-License-Identifier: Apache-2.0
"""Core overlay modules: data model, coordinates, typography and compositing."""

from .calibration import DEFAULT_CALIBRATION, VisualCalibration
from .compositor import CompositionResult, PDFCompositor, compute_draw_origin
from .coordinates import (
    ScreenRect,
    SnapCandidates,
    build_snap_candidates,
    clamp_to_page,
    convert_drag,
    convert_placement,
    page_to_screen,
    screen_to_page,
    snap_point,
)
from .glyph_anchors import extract_glyph_anchors
from .models import (
    Color,
    FontFamily,
    FontStyle,
    GlyphAnchor,
    PageGeometry,
    TextAlign,
    TextDecoration,
    TextElement,
    TextTransform,
    elements_from_json,
    elements_to_json,
    parse_hex_color,
)
from .store import TextElementStore, create_text_element
from .typography import TypographyResolver

__all__ = [
    "Color",
    "CompositionResult",
    "DEFAULT_CALIBRATION",
    "FontFamily",
    "FontStyle",
    "GlyphAnchor",
    "PageGeometry",
    "PDFCompositor",
    "ScreenRect",
    "SnapCandidates",
    "TextAlign",
    "TextDecoration",
    "TextElement",
    "TextElementStore",
    "TextTransform",
    "TypographyResolver",
    "VisualCalibration",
    "build_snap_candidates",
    "clamp_to_page",
    "compute_draw_origin",
    "convert_drag",
    "convert_placement",
    "create_text_element",
    "elements_from_json",
    "elements_to_json",
    "extract_glyph_anchors",
    "page_to_screen",
    "parse_hex_color",
    "screen_to_page",
    "snap_point",
]
