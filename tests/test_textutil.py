"""Tests for number parsing and colour code stripping."""

import pytest

from mythic_catalog.catalog.textutil import (
    as_bool,
    as_str_list,
    contains_keyword,
    parse_float,
    parse_int,
    parse_number,
    strip_color_codes,
)


class TestParseNumber:
    """Test the shared numeric attribute policy."""

    def test_range_reduces_to_midpoint(self) -> None:
        """Test "min-max" ranges become their midpoint."""
        assert parse_number("100-200", 0.0) == 150.0

    def test_plain_numeric_string(self) -> None:
        assert parse_number("50", 0.0) == 50.0

    def test_numbers_pass_through(self) -> None:
        assert parse_number(12, 0.0) == 12.0
        assert parse_number(0.25, 0.0) == 0.25

    @pytest.mark.parametrize("value", ["lots", "", None, True, [1, 2], "10-"])
    def test_unparseable_returns_default(self, value: object) -> None:
        """Test anything non-numeric falls back to the caller's default."""
        assert parse_number(value, 42.0) == 42.0

    def test_negative_range(self) -> None:
        assert parse_number("-10--20", 0.0) == -15.0

    def test_parse_int_truncates_midpoint(self) -> None:
        assert parse_int("1-2", 7) == 1
        assert parse_int("x", 7) == 7

    def test_parse_float_rejects_ranges(self) -> None:
        assert parse_float("1-5") is None
        assert parse_float(" 2.5 ") == 2.5


class TestStripColorCodes:
    """Test Minecraft formatting code removal."""

    def test_ampersand_codes(self) -> None:
        assert strip_color_codes("&cHello&r") == "Hello"

    def test_section_sign_and_case(self) -> None:
        assert strip_color_codes("§LBold §aGreen") == "Bold Green"

    def test_none_is_empty(self) -> None:
        assert strip_color_codes(None) == ""

    def test_unknown_code_kept(self) -> None:
        """Test `&z` is not a formatting code."""
        assert strip_color_codes("&zText") == "&zText"


class TestLooseValues:
    """Test helpers for loosely typed attributes."""

    def test_as_bool_spellings(self) -> None:
        assert as_bool("yes") is True
        assert as_bool("off") is False
        assert as_bool("maybe", None) is None
        assert as_bool(None, True) is True

    def test_as_str_list_wraps_scalars(self) -> None:
        assert as_str_list("one") == ["one"]
        assert as_str_list([1, None, "b"]) == ["1", "b"]
        assert as_str_list(None) == []

    def test_contains_keyword_is_case_insensitive(self) -> None:
        assert contains_keyword("KING", "SkeletonKing", None)
        assert not contains_keyword("queen", "SkeletonKing")
