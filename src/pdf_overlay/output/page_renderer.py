# SPDX-License-Identifier: Apache-2.0
"""Page rendering for the overlay host.

Provides what the overlay needs from a PDF: page count, native page size,
raster previews and glyph anchors for snapping. Every call opens the
document, does its work and closes it again.
"""

from __future__ import annotations

import ctypes
import io
import logging
from dataclasses import dataclass
from typing import Optional

import pypdfium2 as pdfium  # type: ignore[import-untyped]

from pdf_overlay.core.calibration import DEFAULT_CALIBRATION, VisualCalibration
from pdf_overlay.core.compositor import open_document
from pdf_overlay.core.glyph_anchors import extract_glyph_anchors
from pdf_overlay.core.helpers import FPDF_PAGEOBJ_TEXT, text_object_text
from pdf_overlay.core.models import GlyphAnchor, PageGeometry

logger = logging.getLogger(__name__)


@dataclass
class RenderedPage:
    """PNG raster of one page.

    Attributes:
        png_bytes: Encoded PNG image.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    png_bytes: bytes
    width: int
    height: int


@dataclass
class TextRun:
    """A text object found on a page, in PDF user space (bottom-left origin)."""

    text: str
    x: float
    y: float
    font_size: float


def _get_page(pdf: pdfium.PdfDocument, page_number: int) -> pdfium.PdfPage:
    if page_number < 1 or page_number > len(pdf):
        raise IndexError(f"Page {page_number} out of range (1-{len(pdf)})")
    return pdf[page_number - 1]


class PageRenderer:
    """Render pages and report page geometry.

    Uses pypdfium2 for rendering and Pillow for PNG encoding.
    """

    def __init__(self, calibration: Optional[VisualCalibration] = None) -> None:
        """Initialize PageRenderer.

        Args:
            calibration: Source of the default display scale and baseline
                multiplier (default: DEFAULT_CALIBRATION).
        """
        self._calibration = calibration or DEFAULT_CALIBRATION

    def page_count(self, pdf_bytes: bytes) -> int:
        """Number of pages in the document.

        Raises:
            DocumentLoadError: If the bytes are not a readable PDF.
        """
        pdf = open_document(pdf_bytes)
        try:
            return len(pdf)
        finally:
            pdf.close()

    def page_geometry(self, pdf_bytes: bytes, page_number: int) -> PageGeometry:
        """Native size of a page.

        Args:
            pdf_bytes: PDF document bytes.
            page_number: 1-based page number.

        Returns:
            PageGeometry in PDF units.

        Raises:
            DocumentLoadError: If the bytes are not a readable PDF.
            IndexError: If the page does not exist.
        """
        pdf = open_document(pdf_bytes)
        try:
            page = _get_page(pdf, page_number)
            return PageGeometry(width=page.get_width(), height=page.get_height())
        finally:
            pdf.close()

    def render_page(
        self,
        pdf_bytes: bytes,
        page_number: int,
        scale: Optional[float] = None,
    ) -> RenderedPage:
        """Render a page to PNG.

        Args:
            pdf_bytes: PDF document bytes (source or composited).
            page_number: 1-based page number.
            scale: Render scale (default: calibration display scale).

        Returns:
            RenderedPage with the PNG and its pixel size.

        Raises:
            DocumentLoadError: If the bytes are not a readable PDF.
            IndexError: If the page does not exist.
            ValueError: If scale is not positive.
        """
        scale = self._calibration.display_scale if scale is None else scale
        if scale <= 0:
            raise ValueError(f"scale must be positive, got {scale}")

        pdf = open_document(pdf_bytes)
        try:
            page = _get_page(pdf, page_number)
            bitmap = page.render(scale=scale)
            pil_image = bitmap.to_pil()

            buffer = io.BytesIO()
            pil_image.save(buffer, format="PNG")
            logger.debug(
                "Rendered page %d at scale %.2f (%dx%d)",
                page_number,
                scale,
                pil_image.width,
                pil_image.height,
            )
            return RenderedPage(
                png_bytes=buffer.getvalue(),
                width=pil_image.width,
                height=pil_image.height,
            )
        finally:
            pdf.close()

    def glyph_anchors(self, pdf_bytes: bytes, page_number: int) -> list[GlyphAnchor]:
        """Glyph anchors for snapping; an empty list if extraction fails."""
        try:
            return extract_glyph_anchors(pdf_bytes, page_number, self._calibration)
        except Exception as exc:
            logger.warning(
                "Glyph anchor extraction failed for page %d: %s", page_number, exc
            )
            return []

    def text_runs(self, pdf_bytes: bytes, page_number: int) -> list[TextRun]:
        """List the text objects of a page with their origin and size.

        Raises:
            DocumentLoadError: If the bytes are not a readable PDF.
            IndexError: If the page does not exist.
        """
        pdf = open_document(pdf_bytes)
        try:
            page = _get_page(pdf, page_number)
            textpage = page.get_textpage()
            runs = []
            for obj in page.get_objects(filter=[FPDF_PAGEOBJ_TEXT]):
                matrix = obj.get_matrix()
                size = ctypes.c_float(0.0)
                pdfium.raw.FPDFTextObj_GetFontSize(obj.raw, ctypes.byref(size))
                runs.append(
                    TextRun(
                        text=text_object_text(obj, textpage),
                        x=matrix.e,
                        y=matrix.f,
                        font_size=size.value,
                    )
                )
            return runs
        finally:
            pdf.close()
