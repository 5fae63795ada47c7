# SPDX-License-Identifier: Apache-2.0
"""Tests for the data model module."""

import json
import math

import pytest

from pdf_overlay.core.models import (
    SCHEMA_VERSION,
    Color,
    FontStyle,
    TextAlign,
    TextDecoration,
    TextElement,
    TextTransform,
    elements_from_json,
    elements_to_json,
    hex_to_rgb,
    parse_hex_color,
    validate_element,
)


def make_element(**overrides) -> TextElement:
    fields = {"id": "text-1", "content": "Hello", "x": 100.0, "y": 100.0, "page_number": 1}
    fields.update(overrides)
    return TextElement(**fields)


class TestParseHexColor:
    """Tests for parse_hex_color."""

    def test_six_digit(self) -> None:
        """Test #RRGGBB parsing."""
        assert parse_hex_color("#336699") == Color(0x33, 0x66, 0x99)

    def test_three_digit_expands(self) -> None:
        """Test #RGB shorthand expansion."""
        assert parse_hex_color("#fff") == Color(255, 255, 255)
        assert parse_hex_color("#F00") == Color(255, 0, 0)

    def test_hash_is_optional(self) -> None:
        """Test parsing without a leading #."""
        assert parse_hex_color("00ff00") == Color(0, 255, 0)

    @pytest.mark.parametrize("value", ["", "#", "#GGG", "#12345", "#1234567", "red", None, 42])
    def test_invalid_values_resolve_to_black(self, value) -> None:
        """Test invalid inputs never raise and give black."""
        assert parse_hex_color(value) == Color(0, 0, 0)

    def test_hex_to_rgb_unit_range(self) -> None:
        """Test conversion to unit floats."""
        r, g, b = hex_to_rgb("#ff8000")
        assert r == pytest.approx(1.0)
        assert g == pytest.approx(128 / 255)
        assert b == pytest.approx(0.0)


class TestTextElement:
    """Tests for TextElement."""

    def test_defaults(self) -> None:
        """Test default styling values."""
        element = make_element()
        assert element.font_size == 12.0
        assert element.font_family == "Helvetica"
        assert element.color == "#000000"
        assert element.opacity == 1.0
        assert element.text_align == TextAlign.LEFT
        assert element.text_transform == TextTransform.NONE
        assert element.text_decoration is None
        assert element.is_predefined is False

    def test_string_enums_are_coerced(self) -> None:
        """Test raw strings become enum members."""
        element = make_element(
            text_transform="uppercase",
            text_decoration="line-through",
            font_style="italic",
            text_align="bogus",
        )
        assert element.text_transform is TextTransform.UPPERCASE
        assert element.text_decoration is TextDecoration.LINE_THROUGH
        assert element.font_style is FontStyle.ITALIC
        assert element.text_align is TextAlign.LEFT

    def test_effective_font_weight(self) -> None:
        """Test weight derivation from the legacy bold flag."""
        assert make_element().effective_font_weight == 400
        assert make_element(bold=True).effective_font_weight == 700
        assert make_element(bold=True, font_weight=300).effective_font_weight == 300

    @pytest.mark.parametrize(
        ("raw", "weight"),
        [("700", 700), (600.0, 600), ("heavy", None), (True, None), (None, None)],
    )
    def test_font_weight_is_coerced(self, raw, weight) -> None:
        """Test raw weights become ints or None."""
        assert make_element(font_weight=raw).font_weight == weight

    def test_from_dict_unusable_weight(self) -> None:
        """Test an unparseable fontWeight defers to the bold flag."""
        element = TextElement.from_dict(
            {"id": "a", "content": "x", "x": 1, "y": 2, "pageNumber": 1,
             "bold": True, "fontWeight": "bold"}
        )
        assert element.font_weight is None
        assert element.effective_font_weight == 700

    def test_to_dict_uses_camel_case(self) -> None:
        """Test overlay key names."""
        data = make_element(font_weight=700, text_decoration="underline").to_dict()
        assert data["pageNumber"] == 1
        assert data["fontSize"] == 12.0
        assert data["isPredefined"] is False
        assert data["fontWeight"] == 700
        assert data["textDecoration"] == "underline"
        assert "fontStyle" not in data

    def test_from_dict_fills_missing_fields(self) -> None:
        """Test optional fields default when absent."""
        element = TextElement.from_dict(
            {"id": "a", "content": "x", "x": 1, "y": 2, "pageNumber": 3}
        )
        assert element.page_number == 3
        assert element.font_size == 12.0
        assert element.letter_spacing == 0.0
        assert element.font_weight is None
        assert element.text_decoration is None

    def test_from_dict_unknown_enum_falls_back(self) -> None:
        """Test unknown enum values use defaults."""
        element = TextElement.from_dict(
            {
                "id": "a",
                "content": "x",
                "x": 1,
                "y": 2,
                "pageNumber": 1,
                "textTransform": "smallcaps",
                "fontStyle": "slanted",
            }
        )
        assert element.text_transform is TextTransform.NONE
        assert element.font_style is None


class TestValidateElement:
    """Tests for validate_element."""

    def test_valid_element(self) -> None:
        """Test a well-formed element has no problems."""
        assert validate_element(make_element()) == []

    def test_not_an_element(self) -> None:
        """Test arbitrary objects are rejected."""
        assert validate_element({"id": "x"})

    @pytest.mark.parametrize(
        "overrides",
        [
            {"font_size": -12},
            {"font_size": 0},
            {"page_number": 0},
            {"x": -1.0},
            {"y": math.nan},
            {"x": math.inf},
            {"opacity": 1.5},
            {"id": ""},
            {"font_family": ""},
            {"page_number": True},
            {"x": True},
            {"font_size": True},
            {"opacity": False},
        ],
    )
    def test_invalid_fields(self, overrides) -> None:
        """Test each invariant violation is reported."""
        assert validate_element(make_element(**overrides))


class TestElementsJson:
    """Tests for JSON import and export."""

    def test_export_is_versioned(self) -> None:
        """Test exported document structure."""
        data = json.loads(elements_to_json([make_element()]))
        assert data["version"] == SCHEMA_VERSION
        assert data["elements"][0]["id"] == "text-1"

    def test_roundtrip(self) -> None:
        """Test export then import keeps every field."""
        element = make_element(
            bold=True,
            letter_spacing=1.5,
            text_transform="capitalize",
            text_decoration="overline",
            font_style="oblique",
            font_weight=600,
            opacity=0.5,
            is_predefined=True,
        )
        assert elements_from_json(elements_to_json([element])) == [element]

    def test_bare_list_accepted(self) -> None:
        """Test importing a plain list of element dicts."""
        text = json.dumps([make_element().to_dict()])
        assert elements_from_json(text)[0].content == "Hello"

    def test_wrong_version_rejected(self) -> None:
        """Test unsupported schema versions raise ValueError."""
        with pytest.raises(ValueError, match="Unsupported schema version"):
            elements_from_json(json.dumps({"version": "0.1", "elements": []}))
