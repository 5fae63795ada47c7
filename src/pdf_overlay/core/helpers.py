# SPDX-License-Identifier: Apache-2.0
"""Helper functions for pypdfium2 raw API operations.

This module provides ctypes conversion utilities required for
pypdfium2's low-level PDFium API.
"""

from __future__ import annotations

import ctypes
from typing import Any

import pypdfium2 as pdfium  # type: ignore[import-untyped]

# PDFium object type constants
FPDF_PAGEOBJ_TEXT = 1
FPDF_PAGEOBJ_PATH = 2

# Path fill mode (FPDF_FILLMODE_WINDING)
FPDF_FILLMODE_WINDING = 2


def to_widestring(text: str) -> ctypes.Array:
    """Convert Python string to FPDF_WIDESTRING (UTF-16LE + null terminator).

    PDFium expects wide strings in UTF-16LE encoding with a null terminator.

    Args:
        text: Python string to convert

    Returns:
        ctypes array of c_ushort (UTF-16LE encoded)

    Example:
        >>> ws = to_widestring("Hello")
        >>> # ws can now be passed to FPDFText_SetText
    """
    encoded = text.encode("utf-16-le") + b"\x00\x00"
    arr = (ctypes.c_ushort * (len(encoded) // 2))()
    for i in range(len(encoded) // 2):
        arr[i] = int.from_bytes(encoded[i * 2 : i * 2 + 2], "little")
    return arr


def alpha_from_opacity(opacity: float) -> int:
    """Convert an opacity in [0, 1] to a PDFium alpha byte."""
    return max(0, min(255, round(float(opacity) * 255)))


def text_object_text(obj: Any, textpage: Any) -> str:
    """Get text directly from a text object using FPDFTextObj_GetText.

    Args:
        obj: Text page object
        textpage: The textpage for the page containing the object

    Returns:
        Text content of the object (empty string if extraction fails)
    """
    length = pdfium.raw.FPDFTextObj_GetText(obj.raw, textpage.raw, None, 0)
    if length == 0:
        return ""

    # Length is in bytes of UTF-16LE, including the terminator
    buffer = (ctypes.c_ushort * length)()
    pdfium.raw.FPDFTextObj_GetText(obj.raw, textpage.raw, buffer, length)

    chars = []
    for i in range(length):
        if buffer[i] == 0:
            break
        chars.append(chr(buffer[i]))
    return "".join(chars)
