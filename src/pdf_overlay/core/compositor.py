# SPDX-License-Identifier: Apache-2.0
"""PDF compositing using pypdfium2.

This module burns text elements into a copy of the source PDF. The same
algorithm serves both preview and download; only the consumer of the
resulting bytes differs.
"""

from __future__ import annotations

import ctypes
import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Any, Iterable, Optional

import pypdfium2 as pdfium  # type: ignore[import-untyped]

from .calibration import DEFAULT_CALIBRATION, VisualCalibration
from .errors import DocumentLoadError, ElementValidationError
from .helpers import FPDF_FILLMODE_WINDING, alpha_from_opacity, to_widestring
from .models import Color, TextElement, parse_hex_color, validate_element
from .typography import DecorationLine, TypographyResolver, decoration_lines

logger = logging.getLogger(__name__)


@dataclass
class CompositionResult:
    """Composited PDF bytes and per-run statistics."""

    pdf_bytes: bytes
    stats: dict[str, int] = field(default_factory=dict)


def compute_draw_origin(
    element: TextElement,
    page_height: float,
    calibration: VisualCalibration = DEFAULT_CALIBRATION,
) -> tuple[float, float]:
    """Convert a stored top-left position into a PDF baseline origin.

    The stored Y is flipped against the page height and lowered by the
    baseline drop (font size x baseline multiplier); the calibration
    offsets then line the glyphs up with the padded overlay box.

    Args:
        element: Element to place.
        page_height: Native page height in PDF units.
        calibration: Offsets and baseline multiplier.

    Returns:
        (x, y) of the first glyph's baseline origin, both >= 0.
    """
    draw_x = element.x + calibration.x_offset
    draw_y = (
        page_height
        - element.y
        - element.font_size * calibration.baseline_multiplier
        + calibration.y_offset
    )
    return (max(0.0, draw_x), max(0.0, draw_y))


class PDFCompositor:
    """Compose text elements onto a source PDF.

    Example:
        >>> compositor = PDFCompositor()
        >>> element = create_text_element("Hello", 100, 100, page_number=1)
        >>> output = compositor.compose(source_bytes, [element])
    """

    def __init__(
        self,
        calibration: Optional[VisualCalibration] = None,
        resolver: Optional[TypographyResolver] = None,
    ) -> None:
        """Initialize the compositor.

        Args:
            calibration: Placement calibration (default: DEFAULT_CALIBRATION).
            resolver: Typography resolver (default: a new TypographyResolver).
        """
        self._calibration = calibration or DEFAULT_CALIBRATION
        self._resolver = resolver or TypographyResolver()

    @property
    def calibration(self) -> VisualCalibration:
        return self._calibration

    def compose(self, source_pdf: bytes, elements: Iterable[TextElement]) -> bytes:
        """Draw elements into the source PDF and return the new bytes.

        Raises:
            DocumentLoadError: If the source cannot be parsed.
        """
        return self.compose_with_stats(source_pdf, elements).pdf_bytes

    def compose_with_stats(
        self,
        source_pdf: bytes,
        elements: Iterable[TextElement],
    ) -> CompositionResult:
        """Draw elements into the source PDF, reporting what was skipped.

        Each element is drawn independently: invalid elements, elements on
        missing pages and elements that fail while drawing are logged and
        skipped without affecting the others.

        Args:
            source_pdf: Source PDF bytes.
            elements: Elements to draw (any page).

        Returns:
            CompositionResult with the PDF bytes and counters.

        Raises:
            DocumentLoadError: If the source cannot be parsed.
        """
        elements = list(elements)
        stats = {
            "elements": len(elements),
            "drawn": 0,
            "skipped_invalid": 0,
            "skipped_page": 0,
            "skipped_empty": 0,
            "failed": 0,
        }

        pdf = open_document(source_pdf)
        try:
            page_count = len(pdf)
            logger.info(
                "Composing %d element(s) onto %d page(s)", len(elements), page_count
            )

            elements_by_page: dict[Any, list[Any]] = {}
            for element in elements:
                if not isinstance(element, TextElement):
                    logger.warning("Skipping non-element entry: %r", element)
                    stats["skipped_invalid"] += 1
                    continue
                elements_by_page.setdefault(element.page_number, []).append(element)

            fonts: dict[str, Any] = {}
            for page_number, page_elements in elements_by_page.items():
                if (
                    not isinstance(page_number, int)
                    or page_number < 1
                    or page_number > page_count
                ):
                    logger.warning(
                        "Page %r is out of range (1-%d), skipping %d element(s)",
                        page_number,
                        page_count,
                        len(page_elements),
                    )
                    stats["skipped_page"] += len(page_elements)
                    continue

                page = pdf[page_number - 1]
                page_height = page.get_height()
                logger.debug(
                    "Processing page %d (%.1f x %.1f)",
                    page_number,
                    page.get_width(),
                    page_height,
                )

                for element in page_elements:
                    try:
                        drawn = self._draw_element(pdf, page, element, page_height, fonts)
                    except ElementValidationError as exc:
                        logger.warning("Skipping invalid element: %s", exc)
                        stats["skipped_invalid"] += 1
                        continue
                    except Exception as exc:
                        logger.warning(
                            "Failed to draw element %s: %s",
                            getattr(element, "id", "?"),
                            exc,
                        )
                        stats["failed"] += 1
                        continue
                    if drawn:
                        stats["drawn"] += 1
                    else:
                        stats["skipped_empty"] += 1

                page.gen_content()

            buffer = BytesIO()
            pdf.save(buffer)
            logger.info("Composition finished: %s", stats)
            return CompositionResult(pdf_bytes=buffer.getvalue(), stats=stats)
        finally:
            pdf.close()

    def _draw_element(
        self,
        pdf: pdfium.PdfDocument,
        page: pdfium.PdfPage,
        element: TextElement,
        page_height: float,
        fonts: dict[str, Any],
    ) -> bool:
        """Draw one element.

        Returns:
            False if the element has nothing to draw.

        Raises:
            ElementValidationError: If the element is invalid.
        """
        problems = validate_element(element)
        if problems:
            raise ElementValidationError(
                f"{getattr(element, 'id', '?')}: {'; '.join(problems)}",
                stage="validate",
            )

        resolved = self._resolver.resolve(element)
        if not resolved.layout.runs:
            logger.debug("Element %s has no content to draw", element.id)
            return False

        font_handle = self._resolver.load_font(
            lambda name: self._load_standard_font(pdf, name, fonts), resolved.font
        )

        origin_x, origin_y = compute_draw_origin(element, page_height, self._calibration)
        color = parse_hex_color(element.color)
        alpha = alpha_from_opacity(element.opacity)
        logger.debug(
            "Drawing %r at (%.2f, %.2f) font=%s size=%.1f",
            resolved.text,
            origin_x,
            origin_y,
            resolved.font.name,
            element.font_size,
        )

        for run in resolved.layout.runs:
            self._insert_text(
                pdf,
                page,
                font_handle,
                element.font_size,
                run.text,
                origin_x + run.x_offset,
                origin_y,
                color,
                alpha,
            )

        for line in decoration_lines(
            resolved.decoration,
            origin_x,
            origin_y,
            resolved.layout.width,
            element.font_size,
            self._calibration,
        ):
            self._insert_line(page, line, color, alpha)

        return True

    def _load_standard_font(
        self,
        pdf: pdfium.PdfDocument,
        font_name: str,
        fonts: dict[str, Any],
    ) -> Optional[Any]:
        """Load a standard PDF font, caching handles per document."""
        if font_name in fonts:
            return fonts[font_name]

        font_handle = pdfium.raw.FPDFText_LoadStandardFont(
            pdf.raw, font_name.encode("utf-8")
        )
        if font_handle:
            fonts[font_name] = font_handle
            return font_handle
        return None

    def _insert_text(
        self,
        pdf: pdfium.PdfDocument,
        page: pdfium.PdfPage,
        font_handle: Any,
        font_size: float,
        text: str,
        x: float,
        y: float,
        color: Color,
        alpha: int,
    ) -> None:
        """Insert a single text object with its origin at (x, y)."""
        text_obj = pdfium.raw.FPDFPageObj_CreateTextObj(
            pdf.raw, font_handle, ctypes.c_float(font_size)
        )
        if not text_obj:
            raise RuntimeError("FPDFPageObj_CreateTextObj failed")

        if not pdfium.raw.FPDFText_SetText(text_obj, to_widestring(text)):
            pdfium.raw.FPDFPageObj_Destroy(text_obj)
            raise RuntimeError(f"FPDFText_SetText failed for {text!r}")

        pdfium.raw.FPDFPageObj_SetFillColor(text_obj, color.r, color.g, color.b, alpha)
        pdfium.raw.FPDFPageObj_Transform(
            text_obj,
            ctypes.c_double(1.0),
            ctypes.c_double(0.0),
            ctypes.c_double(0.0),
            ctypes.c_double(1.0),
            ctypes.c_double(x),
            ctypes.c_double(y),
        )
        pdfium.raw.FPDFPage_InsertObject(page.raw, text_obj)

    def _insert_line(
        self,
        page: pdfium.PdfPage,
        line: DecorationLine,
        color: Color,
        alpha: int,
    ) -> None:
        """Insert a decoration line as a filled rectangle centred on line.y."""
        rect = pdfium.raw.FPDFPageObj_CreateNewRect(
            ctypes.c_float(line.x0),
            ctypes.c_float(line.y - line.thickness / 2),
            ctypes.c_float(line.width),
            ctypes.c_float(line.thickness),
        )
        if not rect:
            raise RuntimeError("FPDFPageObj_CreateNewRect failed")

        pdfium.raw.FPDFPageObj_SetFillColor(rect, color.r, color.g, color.b, alpha)
        # Fill only, no stroke
        pdfium.raw.FPDFPath_SetDrawMode(rect, FPDF_FILLMODE_WINDING, ctypes.c_int(0))
        pdfium.raw.FPDFPage_InsertObject(page.raw, rect)


def open_document(source_pdf: bytes) -> pdfium.PdfDocument:
    """Open PDF bytes with pypdfium2.

    Raises:
        DocumentLoadError: If the bytes are not a readable PDF.
    """
    if not isinstance(source_pdf, (bytes, bytearray)) or not source_pdf:
        raise DocumentLoadError("Source PDF must be non-empty bytes", stage="load")
    try:
        return pdfium.PdfDocument(bytes(source_pdf))
    except Exception as exc:
        raise DocumentLoadError(
            f"Could not open PDF: {exc}", stage="load", cause=exc
        ) from exc
