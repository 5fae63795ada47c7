# SPDX-License-Identifier: Apache-2.0
"""Tests for PDFCompositor."""

import ctypes
import dataclasses

import pypdfium2 as pdfium
import pytest

from pdf_overlay.core.calibration import DEFAULT_CALIBRATION, VisualCalibration
from pdf_overlay.core.compositor import PDFCompositor, compute_draw_origin
from pdf_overlay.core.errors import DocumentLoadError
from pdf_overlay.core.helpers import FPDF_PAGEOBJ_PATH, FPDF_PAGEOBJ_TEXT
from pdf_overlay.core.models import TextElement
from pdf_overlay.output.page_renderer import PageRenderer


def make_element(element_id: str = "a", **overrides) -> TextElement:
    fields = {"id": element_id, "content": "Hello", "x": 100.0, "y": 100.0, "page_number": 1}
    fields.update(overrides)
    return TextElement(**fields)


def page_objects(pdf_bytes: bytes, obj_type: int, page_index: int = 0) -> list:
    """Fill colours (RGBA) of the page objects of one type."""
    pdf = pdfium.PdfDocument(pdf_bytes)
    try:
        result = []
        for obj in pdf[page_index].get_objects(filter=[obj_type]):
            r, g, b, a = (ctypes.c_uint(), ctypes.c_uint(), ctypes.c_uint(), ctypes.c_uint())
            pdfium.raw.FPDFPageObj_GetFillColor(
                obj.raw, ctypes.byref(r), ctypes.byref(g), ctypes.byref(b), ctypes.byref(a)
            )
            result.append((r.value, g.value, b.value, a.value))
        return result
    finally:
        pdf.close()


class TestComputeDrawOrigin:
    """Tests for compute_draw_origin."""

    def test_letter_page_example(self) -> None:
        """Test the reference placement on a 612x792 page."""
        x, y = compute_draw_origin(make_element(font_size=12), 792)
        assert x == pytest.approx(99.6)
        assert y == pytest.approx(611.8)

    def test_clamped_to_zero(self) -> None:
        """Test origins never go negative."""
        x, y = compute_draw_origin(make_element(x=0, y=790, font_size=12), 792)
        assert (x, y) == (0.0, 0.0)

    def test_custom_calibration(self) -> None:
        """Test offsets come from the calibration."""
        calibration = VisualCalibration(x_offset=0.0, y_offset=0.0, baseline_multiplier=1.0)
        assert compute_draw_origin(make_element(font_size=10), 500, calibration) == (
            100.0,
            390.0,
        )


class TestPDFCompositor:
    """Tests for PDFCompositor."""

    @pytest.fixture
    def compositor(self) -> PDFCompositor:
        return PDFCompositor()

    @pytest.fixture
    def renderer(self) -> PageRenderer:
        return PageRenderer()

    def test_draws_text_at_calibrated_origin(
        self, compositor: PDFCompositor, renderer: PageRenderer, blank_pdf: bytes
    ) -> None:
        """Test the text object origin and size."""
        result = compositor.compose_with_stats(blank_pdf, [make_element()])

        assert result.pdf_bytes.startswith(b"%PDF")
        assert result.stats["drawn"] == 1
        runs = renderer.text_runs(result.pdf_bytes, 1)
        assert len(runs) == 1
        assert runs[0].text == "Hello"
        assert runs[0].x == pytest.approx(99.6, abs=0.01)
        assert runs[0].y == pytest.approx(611.8, abs=0.01)
        assert runs[0].font_size == pytest.approx(12)

    def test_preview_and_download_share_algorithm(
        self, compositor: PDFCompositor, renderer: PageRenderer, blank_pdf: bytes
    ) -> None:
        """Test composing twice gives the same placement."""
        elements = [make_element()]
        first = renderer.text_runs(compositor.compose(blank_pdf, elements), 1)
        second = renderer.text_runs(compositor.compose(blank_pdf, elements), 1)
        assert first == second

    def test_capitalize_transform(
        self, compositor: PDFCompositor, renderer: PageRenderer, blank_pdf: bytes
    ) -> None:
        """Test the drawn string is transformed."""
        element = make_element(content="hello world", text_transform="capitalize")
        runs = renderer.text_runs(compositor.compose(blank_pdf, [element]), 1)
        assert runs[0].text == "Hello World"

    def test_letter_spacing_draws_runs(
        self, compositor: PDFCompositor, renderer: PageRenderer, blank_pdf: bytes
    ) -> None:
        """Test each glyph becomes its own text object."""
        element = make_element(content="AB", font_size=10, letter_spacing=2)
        runs = renderer.text_runs(compositor.compose(blank_pdf, [element]), 1)

        assert sorted(run.text for run in runs) == ["A", "B"]
        xs = sorted(run.x for run in runs)
        assert xs == pytest.approx([99.6, 107.1], abs=0.01)

    def test_string_font_weight_is_drawn(
        self, compositor: PDFCompositor, renderer: PageRenderer, blank_pdf: bytes
    ) -> None:
        """Test a string weight from an update does not drop the element."""
        element = dataclasses.replace(make_element(), font_weight="700")
        result = compositor.compose_with_stats(blank_pdf, [element])

        assert result.stats["drawn"] == 1
        assert result.stats["failed"] == 0
        assert [run.text for run in renderer.text_runs(result.pdf_bytes, 1)] == ["Hello"]

    def test_invalid_element_skipped(
        self, compositor: PDFCompositor, renderer: PageRenderer, blank_pdf: bytes
    ) -> None:
        """Test a negative font size is skipped while others are drawn."""
        elements = [
            make_element("bad", font_size=-12),
            make_element("good", content="Kept", y=200),
        ]
        result = compositor.compose_with_stats(blank_pdf, elements)

        assert result.stats["skipped_invalid"] == 1
        assert result.stats["drawn"] == 1
        assert [run.text for run in renderer.text_runs(result.pdf_bytes, 1)] == ["Kept"]

    def test_non_element_entry_skipped(
        self, compositor: PDFCompositor, blank_pdf: bytes
    ) -> None:
        """Test arbitrary objects in the list are skipped."""
        result = compositor.compose_with_stats(blank_pdf, [make_element(), {"id": "x"}])
        assert result.stats["skipped_invalid"] == 1
        assert result.stats["drawn"] == 1

    def test_out_of_range_page_skipped(
        self, compositor: PDFCompositor, renderer: PageRenderer, blank_pdf: bytes
    ) -> None:
        """Test elements on missing pages are skipped."""
        result = compositor.compose_with_stats(blank_pdf, [make_element(page_number=3)])

        assert result.stats["skipped_page"] == 1
        assert result.stats["drawn"] == 0
        assert renderer.page_count(result.pdf_bytes) == 1

    def test_empty_content_skipped(
        self, compositor: PDFCompositor, blank_pdf: bytes
    ) -> None:
        """Test empty content draws nothing."""
        result = compositor.compose_with_stats(blank_pdf, [make_element(content="")])
        assert result.stats["skipped_empty"] == 1
        assert page_objects(result.pdf_bytes, FPDF_PAGEOBJ_TEXT) == []

    def test_second_page_uses_its_height(
        self, compositor: PDFCompositor, renderer: PageRenderer, two_page_pdf: bytes
    ) -> None:
        """Test elements land on their own page with that page's height."""
        element = make_element(x=10, y=10, font_size=10, page_number=2)
        output = compositor.compose(two_page_pdf, [element])

        assert renderer.text_runs(output, 1) == []
        (run,) = renderer.text_runs(output, 2)
        assert run.x == pytest.approx(9.6, abs=0.01)
        assert run.y == pytest.approx(400 - 10 - 8.5 - 4, abs=0.01)

    @pytest.mark.parametrize("decoration", ["underline", "line-through", "overline"])
    def test_decoration_draws_rectangle(
        self, compositor: PDFCompositor, blank_pdf: bytes, decoration: str
    ) -> None:
        """Test each decoration adds one filled path."""
        element = make_element(text_decoration=decoration, color="#0000ff")
        output = compositor.compose(blank_pdf, [element])

        paths = page_objects(output, FPDF_PAGEOBJ_PATH)
        assert len(paths) == 1
        assert paths[0][:3] == (0, 0, 255)

    def test_legacy_underline_flag(
        self, compositor: PDFCompositor, blank_pdf: bytes
    ) -> None:
        """Test the underline flag alone draws a line."""
        output = compositor.compose(blank_pdf, [make_element(underline=True)])
        assert len(page_objects(output, FPDF_PAGEOBJ_PATH)) == 1

    def test_color_and_opacity(self, compositor: PDFCompositor, blank_pdf: bytes) -> None:
        """Test fill colour and alpha are applied."""
        element = make_element(color="#f00", opacity=0.5)
        output = compositor.compose(blank_pdf, [element])

        (fill,) = page_objects(output, FPDF_PAGEOBJ_TEXT)
        assert fill[:3] == (255, 0, 0)
        assert abs(fill[3] - 128) <= 1

    def test_invalid_color_is_black(self, compositor: PDFCompositor, blank_pdf: bytes) -> None:
        """Test unparseable colours draw black."""
        output = compositor.compose(blank_pdf, [make_element(color="not-a-color")])
        (fill,) = page_objects(output, FPDF_PAGEOBJ_TEXT)
        assert fill[:3] == (0, 0, 0)

    def test_serif_bold_italic_draws(
        self, compositor: PDFCompositor, renderer: PageRenderer, blank_pdf: bytes
    ) -> None:
        """Test non-default standard fonts are usable."""
        element = make_element(font_family="Times New Roman", bold=True, italic=True)
        runs = renderer.text_runs(compositor.compose(blank_pdf, [element]), 1)
        assert [run.text for run in runs] == ["Hello"]

    def test_no_elements_keeps_document(
        self, compositor: PDFCompositor, renderer: PageRenderer, two_page_pdf: bytes
    ) -> None:
        """Test composing nothing still returns a valid PDF."""
        output = compositor.compose(two_page_pdf, [])
        assert renderer.page_count(output) == 2

    @pytest.mark.parametrize("data", [b"", b"not a pdf"])
    def test_unreadable_source(self, compositor: PDFCompositor, data: bytes) -> None:
        """Test corrupt input is the only fatal error."""
        with pytest.raises(DocumentLoadError) as exc_info:
            compositor.compose(data, [make_element()])
        assert exc_info.value.stage == "load"

    def test_uses_default_calibration(self, compositor: PDFCompositor) -> None:
        """Test the default calibration is shared."""
        assert compositor.calibration is DEFAULT_CALIBRATION
