# SPDX-License-Identifier: Apache-2.0
"""Data models for the text overlay editor.

This module defines the text element record shared by the interactive
overlay, the element store and the compositor, together with the small
value types (colours, glyph anchors, page geometry) that flow between them.

Stored element coordinates use the viewer convention: unscaled PDF units,
origin at the top-left of the page, Y increasing downward.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"

# Choices offered by the editor controls
FONT_FAMILIES: tuple[str, ...] = ("Arial", "Times New Roman", "Courier New")
FONT_SIZES: tuple[int, ...] = (8, 10, 12, 14, 16, 18, 20, 24, 28, 32, 36, 48)
PRESET_COLORS: tuple[str, ...] = (
    "#000000", "#333333", "#666666", "#999999",
    "#FF0000", "#00FF00", "#0000FF", "#FFFF00",
    "#FF00FF", "#00FFFF", "#FFA500", "#800080",
)

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class TextAlign(str, Enum):
    """Horizontal alignment recorded for the overlay box."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class TextTransform(str, Enum):
    """Case transformation applied to content before drawing."""

    NONE = "none"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    CAPITALIZE = "capitalize"


class TextDecoration(str, Enum):
    """Line decoration drawn alongside the text."""

    NONE = "none"
    UNDERLINE = "underline"
    OVERLINE = "overline"
    LINE_THROUGH = "line-through"


class FontStyle(str, Enum):
    """CSS-like font style."""

    NORMAL = "normal"
    ITALIC = "italic"
    OBLIQUE = "oblique"


class FontFamily(str, Enum):
    """Canonical font families available to the compositor."""

    SANS = "sans"  # Helvetica
    SERIF = "serif"  # Times
    MONO = "mono"  # Courier


def _enum_or_default(enum_cls: type[Enum], value: Any, default: Any) -> Any:
    """Convert a raw value to an enum member, falling back to default."""
    if value is None:
        return default
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        logger.debug("Unknown %s value %r, using %r", enum_cls.__name__, value, default)
        return default


def _weight_or_none(value: Any) -> Optional[int]:
    """Convert a raw font weight to an int, None when unusable."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        logger.debug("Unknown font weight %r, deferring to bold flag", value)
        return None


@dataclass
class Color:
    """RGB color value.

    Attributes:
        r: Red component (0-255)
        g: Green component (0-255)
        b: Blue component (0-255)
    """

    r: int = 0
    g: int = 0
    b: int = 0

    def to_unit(self) -> tuple[float, float, float]:
        """Return the color as an RGB triple in [0, 1]."""
        return (self.r / 255, self.g / 255, self.b / 255)


def parse_hex_color(value: Optional[str]) -> Color:
    """Parse a 3- or 6-digit hex string into a Color.

    The leading ``#`` is optional. Empty strings, other lengths and
    non-hex characters resolve to black; this function never raises.

    Args:
        value: Hex color string such as ``"#fff"`` or ``"336699"``.

    Returns:
        Parsed color (black when the input is unusable).
    """
    if not isinstance(value, str):
        return Color()

    sanitized = value.strip().lstrip("#")
    if not sanitized or any(ch not in HEX_DIGITS for ch in sanitized):
        if sanitized:
            logger.debug("Invalid color value %r, using black", value)
        return Color()

    if len(sanitized) == 3:
        sanitized = "".join(ch * 2 for ch in sanitized)
    elif len(sanitized) != 6:
        logger.debug("Invalid color length %r, using black", value)
        return Color()

    return Color(
        r=int(sanitized[0:2], 16),
        g=int(sanitized[2:4], 16),
        b=int(sanitized[4:6], 16),
    )


def hex_to_rgb(value: Optional[str]) -> tuple[float, float, float]:
    """Convert a hex color string to an RGB triple in [0, 1]."""
    return parse_hex_color(value).to_unit()


@dataclass
class PageGeometry:
    """Native (unscaled) page size in PDF user-space units."""

    width: float
    height: float


@dataclass
class GlyphAnchor:
    """Origin of a text run found in a page content stream.

    Coordinates are already converted to the stored convention
    (top-left origin, Y down) so they compare directly with elements.

    Attributes:
        x: Left edge of the run
        y: Top of the run's glyph box
        font_size: Effective font size in points
        text: Text shown by the run (may be empty for hex/CID strings)
    """

    x: float
    y: float
    font_size: float
    text: str = ""


@dataclass
class TextElement:
    """A positioned text label overlaid on a PDF page.

    Attributes:
        id: Unique identifier, stable for the element's lifetime
        content: Text content (may be empty)
        x: Left position in unscaled page units (top-left origin)
        y: Top position in unscaled page units (top-left origin)
        page_number: 1-based page number
        font_size: Font size in points
        font_family: Free-text family label, matched fuzzily
        color: Hex color string
        bold: Legacy bold flag
        italic: Legacy italic flag
        underline: Legacy underline flag
        is_predefined: Content is fixed at creation
        letter_spacing: Extra advance after each glyph
        word_spacing: Extra advance after each word
        line_height: Line height multiplier (overlay only)
        text_align: Alignment (overlay only)
        text_transform: Case transformation
        text_decoration: Decoration, None defers to ``underline``
        font_weight: 100-900, None defers to ``bold``
        font_style: Font style, None defers to ``italic``
        opacity: Opacity in [0, 1]
    """

    id: str
    content: str
    x: float
    y: float
    page_number: int
    font_size: float = 12.0
    font_family: str = "Helvetica"
    color: str = "#000000"
    bold: bool = False
    italic: bool = False
    underline: bool = False
    is_predefined: bool = False
    letter_spacing: float = 0.0
    word_spacing: float = 0.0
    line_height: float = 1.2
    text_align: TextAlign = TextAlign.LEFT
    text_transform: TextTransform = TextTransform.NONE
    text_decoration: Optional[TextDecoration] = None
    font_weight: Optional[int] = None
    font_style: Optional[FontStyle] = None
    opacity: float = 1.0

    def __post_init__(self) -> None:
        # Accept raw strings for enum fields (updates arrive as plain values)
        self.text_align = _enum_or_default(TextAlign, self.text_align, TextAlign.LEFT)
        self.text_transform = _enum_or_default(
            TextTransform, self.text_transform, TextTransform.NONE
        )
        self.text_decoration = _enum_or_default(TextDecoration, self.text_decoration, None)
        self.font_style = _enum_or_default(FontStyle, self.font_style, None)
        self.font_weight = _weight_or_none(self.font_weight)

    @property
    def effective_font_weight(self) -> int:
        """Font weight, derived from the legacy flag when unset."""
        if self.font_weight is not None:
            return int(self.font_weight)
        return 700 if self.bold else 400

    def to_dict(self) -> dict[str, Any]:
        """Convert to the overlay's camelCase dictionary."""
        result: dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "x": self.x,
            "y": self.y,
            "pageNumber": self.page_number,
            "fontSize": self.font_size,
            "fontFamily": self.font_family,
            "color": self.color,
            "bold": self.bold,
            "italic": self.italic,
            "underline": self.underline,
            "isPredefined": self.is_predefined,
            "letterSpacing": self.letter_spacing,
            "wordSpacing": self.word_spacing,
            "lineHeight": self.line_height,
            "textAlign": self.text_align.value,
            "textTransform": self.text_transform.value,
            "opacity": self.opacity,
        }
        if self.text_decoration is not None:
            result["textDecoration"] = self.text_decoration.value
        if self.font_weight is not None:
            result["fontWeight"] = self.font_weight
        if self.font_style is not None:
            result["fontStyle"] = self.font_style.value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TextElement:
        """Create from a camelCase dictionary.

        Optional typography fields fall back to their defaults when
        missing or unrecognised.
        """
        return cls(
            id=str(data["id"]),
            content=str(data.get("content", "")),
            x=float(data["x"]),
            y=float(data["y"]),
            page_number=int(data["pageNumber"]),
            font_size=float(data.get("fontSize", 12.0)),
            font_family=str(data.get("fontFamily", "Helvetica")),
            color=str(data.get("color", "#000000")),
            bold=bool(data.get("bold", False)),
            italic=bool(data.get("italic", False)),
            underline=bool(data.get("underline", False)),
            is_predefined=bool(data.get("isPredefined", False)),
            letter_spacing=float(data.get("letterSpacing") or 0.0),
            word_spacing=float(data.get("wordSpacing") or 0.0),
            line_height=float(data.get("lineHeight") or 1.2),
            text_align=_enum_or_default(TextAlign, data.get("textAlign"), TextAlign.LEFT),
            text_transform=_enum_or_default(
                TextTransform, data.get("textTransform"), TextTransform.NONE
            ),
            text_decoration=_enum_or_default(
                TextDecoration, data.get("textDecoration"), None
            ),
            font_weight=_weight_or_none(data.get("fontWeight")),
            font_style=_enum_or_default(FontStyle, data.get("fontStyle"), None),
            opacity=float(data.get("opacity", 1.0)),
        )


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_element(element: Any) -> list[str]:
    """Check a text element against the data model invariants.

    Args:
        element: Candidate element

    Returns:
        List of problems; empty when the element is valid
    """
    if not isinstance(element, TextElement):
        return [f"not a TextElement: {type(element).__name__}"]

    problems: list[str] = []
    if not isinstance(element.id, str) or not element.id:
        problems.append("id must be a non-empty string")
    if not isinstance(element.content, str):
        problems.append("content must be a string")
    for name in ("x", "y"):
        value = getattr(element, name)
        if not _is_number(value) or not math.isfinite(value) or value < 0:
            problems.append(f"{name} must be finite and non-negative, got {value!r}")
    size = element.font_size
    if not _is_number(size) or not math.isfinite(size) or size <= 0:
        problems.append(f"font_size must be positive, got {size!r}")
    if not isinstance(element.font_family, str) or not element.font_family:
        problems.append("font_family must be a non-empty string")
    if (
        not isinstance(element.page_number, int)
        or isinstance(element.page_number, bool)
        or element.page_number < 1
    ):
        problems.append(f"page_number must be >= 1, got {element.page_number!r}")
    opacity = element.opacity
    if not _is_number(opacity) or not 0.0 <= opacity <= 1.0:
        problems.append(f"opacity must be within [0, 1], got {opacity!r}")
    return problems


def elements_to_json(elements: list[TextElement], indent: int = 2) -> str:
    """Export elements to a versioned JSON string.

    Args:
        elements: Elements to export
        indent: JSON indentation level

    Returns:
        JSON string representation
    """
    data = {
        "version": SCHEMA_VERSION,
        "elements": [element.to_dict() for element in elements],
    }
    return json.dumps(data, indent=indent, ensure_ascii=False)


def elements_from_json(json_str: str) -> list[TextElement]:
    """Load elements from a JSON string.

    Accepts either the versioned document written by ``elements_to_json``
    or a bare list of element dictionaries.

    Raises:
        ValueError: If the schema version is unsupported
    """
    data = json.loads(json_str)
    if isinstance(data, list):
        return [TextElement.from_dict(item) for item in data]

    version = data.get("version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise ValueError(
            f"Unsupported schema version: {version} (expected {SCHEMA_VERSION})"
        )
    return [TextElement.from_dict(item) for item in data.get("elements", [])]
