# SPDX-License-Identifier: Apache-2.0
"""Glyph anchor extraction using pikepdf content-stream parsing.

Walks the text operators of a page and records where each text-showing
operator starts. The positions feed the snapping logic so new elements
can line up with text already printed on the page.

Known Limitations:
    - The text position is not advanced after Tj/TJ (that would need font
      metrics), so consecutive show operators without an intervening
      Tm/Td share one anchor.
    - The ``cm`` graphics matrix and form XObjects are not followed.
"""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Any

import pikepdf

from .calibration import DEFAULT_CALIBRATION, VisualCalibration
from .errors import DocumentLoadError
from .models import GlyphAnchor

logger = logging.getLogger(__name__)

_SHOW_OPERATORS = frozenset({"Tj", "TJ", "'", '"'})


def _string_text(operand: Any) -> str:
    """Best-effort decoding of a show operand (string or TJ array)."""
    if isinstance(operand, pikepdf.Array):
        return "".join(
            _string_text(item) for item in operand if isinstance(item, pikepdf.String)
        )
    if isinstance(operand, pikepdf.String):
        try:
            return str(operand)
        except (UnicodeDecodeError, ValueError):
            return ""
    return ""


def extract_glyph_anchors(
    pdf_bytes: bytes,
    page_number: int,
    calibration: VisualCalibration = DEFAULT_CALIBRATION,
) -> list[GlyphAnchor]:
    """Extract text-run origins from one page.

    Args:
        pdf_bytes: PDF document bytes.
        page_number: 1-based page number.
        calibration: Baseline multiplier used to go from baseline to top.

    Returns:
        Anchors in content-stream order, in stored (top-left) coordinates.

    Raises:
        DocumentLoadError: If the bytes cannot be opened.
        IndexError: If the page does not exist.
    """
    try:
        pdf = pikepdf.open(BytesIO(pdf_bytes))
    except Exception as exc:
        raise DocumentLoadError(
            f"Could not open PDF: {exc}", stage="anchors", cause=exc
        ) from exc

    try:
        if page_number < 1 or page_number > len(pdf.pages):
            raise IndexError(
                f"Page {page_number} out of range (1-{len(pdf.pages)})"
            )

        page = pdf.pages[page_number - 1]
        mediabox = [float(v) for v in page.mediabox]
        left, top = mediabox[0], mediabox[3]

        anchors: list[GlyphAnchor] = []
        in_text = False

        # Text line origin and the scale part of the text matrix
        current_x = 0.0
        current_y = 0.0
        scale_x = 1.0
        scale_y = 1.0
        text_leading = 0.0
        font_size = 0.0

        for operands, operator in pikepdf.parse_content_stream(page):
            op_str = str(operator)

            if op_str == "BT":
                in_text = True
                current_x = current_y = 0.0
                scale_x = scale_y = 1.0
            elif op_str == "ET":
                in_text = False
            elif op_str == "Tf" and len(operands) >= 2:
                # Tf is graphics state, valid outside BT too
                font_size = float(operands[1])
            elif op_str == "TL" and len(operands) >= 1:
                text_leading = float(operands[0])
            elif not in_text:
                continue
            elif op_str == "Tm" and len(operands) >= 6:
                scale_x = float(operands[0]) or 1.0
                scale_y = float(operands[3]) or 1.0
                current_x = float(operands[4])
                current_y = float(operands[5])
            elif op_str == "Td" and len(operands) >= 2:
                current_x += float(operands[0]) * scale_x
                current_y += float(operands[1]) * scale_y
            elif op_str == "TD" and len(operands) >= 2:
                current_x += float(operands[0]) * scale_x
                current_y += float(operands[1]) * scale_y
                text_leading = -float(operands[1])
            elif op_str == "T*":
                current_y -= text_leading * scale_y
            elif op_str in _SHOW_OPERATORS:
                if op_str in ("'", '"'):
                    # Both move to the next line before showing
                    current_y -= text_leading * scale_y
                size = abs(font_size * scale_y)
                anchors.append(
                    GlyphAnchor(
                        x=current_x - left,
                        y=(top - current_y) - size * calibration.baseline_multiplier,
                        font_size=size,
                        text=_string_text(operands[-1]) if operands else "",
                    )
                )

        logger.debug("Found %d glyph anchor(s) on page %d", len(anchors), page_number)
        return anchors
    finally:
        pdf.close()
