# SPDX-License-Identifier: Apache-2.0
"""Typography resolution for text elements.

Maps an element's declarative style (family, weight, style, decoration,
transform, spacing) onto a standard PDF font, the literal string to draw,
the decoration lines and the run layout used by the compositor.

Glyph metrics of the real fonts are not consulted: text width comes from
``measure_text``, and every caller that needs a width goes through it so
that decorations and multi-run advances agree with each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .calibration import DEFAULT_CALIBRATION, VisualCalibration
from .errors import FontResolutionError
from .models import FontFamily, FontStyle, TextDecoration, TextElement, TextTransform

logger = logging.getLogger(__name__)

BOLD_WEIGHT_THRESHOLD = 600

DEFAULT_FONT_NAME = "Helvetica"

SERIF_PATTERNS: tuple[str, ...] = (
    "times",
    "roman",
    "serif",
    "nimbus",  # NimbusRomNo9L is Times-like
    "palatino",
    "georgia",
    "garamond",
    "cambria",
)

MONO_PATTERNS: tuple[str, ...] = (
    "courier",
    "mono",
    "consola",
    "inconsolata",
    "menlo",
    "source code",
    "fira code",
)

STANDARD_FONTS: dict[tuple[FontFamily, bool, bool], str] = {
    (FontFamily.SANS, False, False): "Helvetica",
    (FontFamily.SANS, True, False): "Helvetica-Bold",
    (FontFamily.SANS, False, True): "Helvetica-Oblique",
    (FontFamily.SANS, True, True): "Helvetica-BoldOblique",
    (FontFamily.SERIF, False, False): "Times-Roman",
    (FontFamily.SERIF, True, False): "Times-Bold",
    (FontFamily.SERIF, False, True): "Times-Italic",
    (FontFamily.SERIF, True, True): "Times-BoldItalic",
    (FontFamily.MONO, False, False): "Courier",
    (FontFamily.MONO, True, False): "Courier-Bold",
    (FontFamily.MONO, False, True): "Courier-Oblique",
    (FontFamily.MONO, True, True): "Courier-BoldOblique",
}

NARROW_GLYPHS = frozenset("iltf")
WIDE_GLYPHS = frozenset("mwMW")


@dataclass(frozen=True)
class WidthRatios:
    """Glyph advance as a fraction of the font size."""

    base: float
    narrow: float
    wide: float


WIDTH_RATIOS: dict[FontFamily, WidthRatios] = {
    FontFamily.SANS: WidthRatios(base=0.55, narrow=0.30, wide=0.80),
    FontFamily.SERIF: WidthRatios(base=0.50, narrow=0.28, wide=0.75),
    FontFamily.MONO: WidthRatios(base=0.60, narrow=0.60, wide=0.60),
}


@dataclass(frozen=True)
class ResolvedFont:
    """Concrete standard font chosen for an element."""

    name: str
    family: FontFamily
    is_bold: bool = False
    is_italic: bool = False


@dataclass
class GlyphRun:
    """A piece of text drawn with one text object at an x offset."""

    text: str
    x_offset: float


@dataclass
class TextLayout:
    """Runs for one element and the total laid-out width."""

    runs: list[GlyphRun] = field(default_factory=list)
    width: float = 0.0

    @property
    def is_single_run(self) -> bool:
        return len(self.runs) == 1


@dataclass
class DecorationLine:
    """Horizontal decoration segment in PDF coordinates (bottom-left origin)."""

    x0: float
    x1: float
    y: float
    thickness: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0


@dataclass
class ResolvedText:
    """Everything the compositor needs to draw one element."""

    font: ResolvedFont
    text: str
    layout: TextLayout
    decoration: TextDecoration


def resolve_family(font_family: Optional[str]) -> FontFamily:
    """Match a free-text family label to a canonical family.

    Matching is a case-insensitive substring test. Monospace patterns are
    checked first, and "sans" labels (e.g. "sans-serif") never read as serif.
    """
    name_lower = (font_family or "").lower()
    if any(pattern in name_lower for pattern in MONO_PATTERNS):
        return FontFamily.MONO
    if "sans" in name_lower:
        return FontFamily.SANS
    if any(pattern in name_lower for pattern in SERIF_PATTERNS):
        return FontFamily.SERIF
    return FontFamily.SANS


def is_bold(element: TextElement) -> bool:
    """Whether the element should use a bold variant."""
    weight = element.font_weight
    return bool(element.bold) or (weight is not None and weight >= BOLD_WEIGHT_THRESHOLD)


def is_italic(element: TextElement) -> bool:
    """Whether the element should use an italic/oblique variant."""
    return bool(element.italic) or element.font_style in (
        FontStyle.ITALIC,
        FontStyle.OBLIQUE,
    )


def standard_font_name(family: FontFamily, bold: bool, italic: bool) -> str:
    """Return the standard PDF font name for a family/style combination."""
    return STANDARD_FONTS.get((family, bold, italic), DEFAULT_FONT_NAME)


def resolve_font(element: TextElement) -> ResolvedFont:
    """Select the font variant for an element."""
    family = resolve_family(element.font_family)
    bold = is_bold(element)
    italic = is_italic(element)
    return ResolvedFont(
        name=standard_font_name(family, bold, italic),
        family=family,
        is_bold=bold,
        is_italic=italic,
    )


def apply_text_transform(text: str, transform: Optional[TextTransform]) -> str:
    """Apply a CSS-like text transform.

    ``capitalize`` upper-cases the first letter of each space-separated
    word and leaves the rest of the word untouched.
    """
    if not text:
        return ""
    if transform == TextTransform.UPPERCASE:
        return text.upper()
    if transform == TextTransform.LOWERCASE:
        return text.lower()
    if transform == TextTransform.CAPITALIZE:
        return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))
    return text


def resolve_decoration(element: TextElement) -> TextDecoration:
    """Explicit ``text_decoration`` wins over the legacy underline flag."""
    if element.text_decoration is not None:
        return element.text_decoration
    return TextDecoration.UNDERLINE if element.underline else TextDecoration.NONE


def glyph_width(char: str, font_size: float, family: FontFamily) -> float:
    """Estimated advance of a single character."""
    ratios = WIDTH_RATIOS.get(family, WIDTH_RATIOS[FontFamily.SANS])
    if char in NARROW_GLYPHS:
        ratio = ratios.narrow
    elif char in WIDE_GLYPHS:
        ratio = ratios.wide
    else:
        ratio = ratios.base
    return font_size * ratio


def measure_text(text: str, font_size: float, family: FontFamily) -> float:
    """Estimate the width of text drawn in a standard font.

    Args:
        text: Text to measure.
        font_size: Font size in points.
        family: Canonical font family.

    Returns:
        Estimated width in points.
    """
    if not text:
        return 0.0
    return sum(glyph_width(char, font_size, family) for char in text)


def layout_runs(
    text: str,
    font_size: float,
    family: FontFamily,
    letter_spacing: float = 0.0,
    word_spacing: float = 0.0,
) -> TextLayout:
    """Split text into positioned runs honouring letter/word spacing.

    With no extra spacing the whole string is one run at offset 0.
    Otherwise the text is walked word by word (character by character
    inside a word when letter spacing is set), advancing a cursor by the
    estimated width plus the configured spacing after each unit.

    Args:
        text: Already transformed text.
        font_size: Font size in points.
        family: Canonical font family.
        letter_spacing: Extra advance after each character.
        word_spacing: Extra advance after each word.

    Returns:
        TextLayout with runs and the total span width.
    """
    if not text:
        return TextLayout(runs=[], width=0.0)

    if not letter_spacing and not word_spacing:
        return TextLayout(
            runs=[GlyphRun(text=text, x_offset=0.0)],
            width=measure_text(text, font_size, family),
        )

    runs: list[GlyphRun] = []
    cursor = 0.0
    end = 0.0
    words = text.split(" ")
    space_width = measure_text(" ", font_size, family)

    for index, word in enumerate(words):
        if word:
            if letter_spacing:
                for char in word:
                    runs.append(GlyphRun(text=char, x_offset=cursor))
                    cursor += glyph_width(char, font_size, family)
                    end = cursor
                    cursor += letter_spacing
            else:
                runs.append(GlyphRun(text=word, x_offset=cursor))
                cursor += measure_text(word, font_size, family)
                end = cursor
        if index < len(words) - 1:
            cursor += space_width + word_spacing

    return TextLayout(runs=runs, width=end)


def decoration_lines(
    decoration: TextDecoration,
    x: float,
    baseline_y: float,
    width: float,
    font_size: float,
    calibration: VisualCalibration = DEFAULT_CALIBRATION,
) -> list[DecorationLine]:
    """Compute decoration segments for a drawn run.

    Args:
        decoration: Resolved decoration.
        x: Left edge of the text in PDF coordinates.
        baseline_y: Baseline in PDF coordinates (Y up).
        width: Laid-out text width from ``layout_runs``.
        font_size: Font size in points.
        calibration: Decoration geometry constants.

    Returns:
        Zero or one decoration line.
    """
    if decoration == TextDecoration.NONE or width <= 0:
        return []

    if decoration == TextDecoration.UNDERLINE:
        y = baseline_y - calibration.underline_gap
    elif decoration == TextDecoration.LINE_THROUGH:
        y = baseline_y + font_size * calibration.line_through_ratio
    elif decoration == TextDecoration.OVERLINE:
        y = baseline_y + font_size * calibration.overline_ratio
    else:
        return []

    return [
        DecorationLine(
            x0=x,
            x1=x + width,
            y=y,
            thickness=calibration.decoration_thickness,
        )
    ]


class TypographyResolver:
    """Resolve element styling into drawing instructions."""

    def resolve(self, element: TextElement) -> ResolvedText:
        """Resolve font, transformed text, layout and decoration.

        Args:
            element: Element to resolve.

        Returns:
            ResolvedText for the compositor.
        """
        font = resolve_font(element)
        text = apply_text_transform(element.content or "", element.text_transform)
        layout = layout_runs(
            text,
            element.font_size,
            font.family,
            letter_spacing=element.letter_spacing or 0.0,
            word_spacing=element.word_spacing or 0.0,
        )
        return ResolvedText(
            font=font,
            text=text,
            layout=layout,
            decoration=resolve_decoration(element),
        )

    def load_font(
        self,
        loader: Callable[[str], Optional[Any]],
        font: ResolvedFont,
    ) -> Any:
        """Load a font handle, falling back to Helvetica on any failure.

        Args:
            loader: Callable returning a handle (or None) for a font name.
            font: Font selected by ``resolve``.

        Returns:
            Font handle for the requested variant or for Helvetica.

        Raises:
            FontResolutionError: If even the Helvetica fallback cannot load.
        """
        try:
            handle = loader(font.name)
        except Exception as exc:
            logger.warning("Font %s failed to load (%s), using %s", font.name, exc, DEFAULT_FONT_NAME)
            handle = None

        if handle:
            return handle

        if font.name != DEFAULT_FONT_NAME:
            logger.warning("Font %s unavailable, using %s", font.name, DEFAULT_FONT_NAME)
        handle = loader(DEFAULT_FONT_NAME)
        if not handle:
            raise FontResolutionError(
                f"Standard font {DEFAULT_FONT_NAME} could not be loaded",
                stage="font",
            )
        return handle
