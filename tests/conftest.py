# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures: in-memory PDFs built with pypdfium2 and pikepdf."""

from __future__ import annotations

import ctypes
from io import BytesIO
from typing import Callable

import pikepdf
import pypdfium2 as pdfium
import pytest


def _build_pdf(page_sizes: tuple[tuple[float, float], ...]) -> bytes:
    pdf = pdfium.PdfDocument.new()
    try:
        for width, height in page_sizes:
            pdf.new_page(width, height)
        buffer = BytesIO()
        pdf.save(buffer)
        return buffer.getvalue()
    finally:
        pdf.close()


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Factory for blank PDFs: ``make_pdf((612, 792), (300, 400))``."""

    def factory(*page_sizes: tuple[float, float]) -> bytes:
        return _build_pdf(page_sizes or ((612, 792),))

    return factory


@pytest.fixture
def blank_pdf() -> bytes:
    """Single US Letter page."""
    return _build_pdf(((612, 792),))


@pytest.fixture
def two_page_pdf() -> bytes:
    """Two pages of different sizes."""
    return _build_pdf(((612, 792), (300, 400)))


@pytest.fixture
def hello_pdf() -> bytes:
    """US Letter page with "Hello" in 12pt Helvetica at (100, 700)."""
    pdf = pdfium.PdfDocument.new()
    try:
        page = pdf.new_page(612, 792)
        font = pdfium.raw.FPDFText_LoadStandardFont(pdf.raw, b"Helvetica")
        text_obj = pdfium.raw.FPDFPageObj_CreateTextObj(pdf.raw, font, ctypes.c_float(12))
        text = "Hello".encode("utf-16-le") + b"\x00\x00"
        buffer = (ctypes.c_ushort * (len(text) // 2)).from_buffer_copy(text)
        pdfium.raw.FPDFText_SetText(text_obj, buffer)
        pdfium.raw.FPDFPageObj_Transform(
            text_obj,
            ctypes.c_double(1),
            ctypes.c_double(0),
            ctypes.c_double(0),
            ctypes.c_double(1),
            ctypes.c_double(100),
            ctypes.c_double(700),
        )
        pdfium.raw.FPDFPage_InsertObject(page.raw, text_obj)
        page.gen_content()
        out = BytesIO()
        pdf.save(out)
        return out.getvalue()
    finally:
        pdf.close()


@pytest.fixture
def make_content_pdf() -> Callable[[bytes], bytes]:
    """Factory for a one-page PDF with a hand-written content stream."""

    def factory(content: bytes, mediabox: tuple[float, ...] = (0, 0, 612, 792)) -> bytes:
        pdf = pikepdf.new()
        pdf.add_blank_page(page_size=(mediabox[2] - mediabox[0], mediabox[3] - mediabox[1]))
        page = pdf.pages[0]
        page.obj[pikepdf.Name.MediaBox] = pikepdf.Array(list(mediabox))
        page.obj[pikepdf.Name.Contents] = pdf.make_stream(content)
        out = BytesIO()
        pdf.save(out)
        pdf.close()
        return out.getvalue()

    return factory
