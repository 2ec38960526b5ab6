"""
Unit tests for property name/number matchers and product type detection.
"""
import pytest

from revenue_parser.derived.matchers import (
    PROPERTY_NAME_MATCHERS,
    PROPERTY_NUMBER_MATCHERS,
    UNKNOWN_PROPERTY,
    detect_product_type,
    extract_property_name,
    extract_property_number,
    first_match,
    string_hash,
    synthesize_property_number,
)
from revenue_parser.models.revenue import ProductType


def matcher(matchers, name):
    return next(m for m in matchers if m.name == name)


class TestPropertyNameMatchers:
    """Each named matcher on its own."""

    @pytest.mark.parametrize(
        "name, text, expected",
        [
            ("training_shape", "Verde 13-2HZ NBRR 138366-1 GAS", "Verde 13-2HZ NBRR"),
            ("hz_well", "Lone 4-1H Unit", "Lone 4-1H Unit"),
            ("h_well", "Parker 10-3H", "Parker 10-3H"),
            ("dash_number", "Parker 10-22", "Parker 10-22"),
            ("number_h", "Mesa 2H oil", "Mesa 2H"),
            ("general_two_token", "Johnson Ranch", "Johnson Ranch"),
        ],
    )
    def test_matcher(self, name, text, expected):
        assert matcher(PROPERTY_NAME_MATCHERS, name).match(text) == expected

    def test_no_match(self):
        assert matcher(PROPERTY_NAME_MATCHERS, "h_well").match("Johnson Ranch") is None

    def test_first_match_reports_matcher(self):
        value, name = first_match(PROPERTY_NAME_MATCHERS, "Verde 13-2HZ NBRR")
        assert (value, name) == ("Verde 13-2HZ NBRR", "training_shape")

    def test_first_match_nothing(self):
        assert first_match(PROPERTY_NAME_MATCHERS, "") == (None, None)


class TestExtractPropertyName:
    """Tests for the full property name fallback chain."""

    def test_training_shape(self):
        assert extract_property_name("Verde 13-2HZ NBRR 138366-1 GAS") == "Verde 13-2HZ NBRR"

    def test_generic_words_removed(self):
        assert extract_property_name("Smith Lease Oil") == "Smith"

    def test_separator_fallback(self):
        assert extract_property_name("Royalty: Smith") == "Royalty"

    def test_single_word(self):
        assert extract_property_name("Royalty") == "Royalty"

    def test_empty(self):
        assert extract_property_name("") == UNKNOWN_PROPERTY
        assert extract_property_name("   ") == UNKNOWN_PROPERTY

    def test_only_generic_word(self):
        assert extract_property_name("Well") == UNKNOWN_PROPERTY


class TestPropertyNumber:
    """Tests for property number extraction and synthesis."""

    @pytest.mark.parametrize(
        "name, text, expected",
        [
            ("six_digit_dash", "Verde 138366-1", "138366-1"),
            ("five_six_digit_dash", "Lease 12345-2", "12345-2"),
            ("four_six_digit_dash", "Lease 1234-7", "1234-7"),
            ("property_label", "Property # 88", "88"),
            ("well_label", "Well #42-1", "42-1"),
            ("id_label", "ID 77", "77"),
            ("bare_digits", "Tract 4410 north", "4410"),
        ],
    )
    def test_matcher(self, name, text, expected):
        assert matcher(PROPERTY_NUMBER_MATCHERS, name).match(text) == expected

    def test_most_specific_wins(self):
        assert extract_property_number("Verde 13-2HZ 138366-1 Property #12", "Verde") == "138366-1"

    def test_string_hash(self):
        assert string_hash("") == 0
        assert string_hash("A") == 65
        assert string_hash("ab") == 97 * 31 + 98

    def test_string_hash_uses_utf16_units(self):
        """Characters outside the BMP hash as their surrogate pair."""
        assert string_hash("\U0001F600") == 0xD83D * 31 + 0xDE00
        assert synthesize_property_number("\U0001F600") == "972899-1"

    def test_string_hash_wraps_to_signed_32_bit(self):
        value = string_hash("Johnson Ranch North Extension")
        assert -2**31 <= value < 2**31

    def test_synthesized_number(self):
        assert synthesize_property_number("A") == "100065-1"

    def test_synthesis_is_deterministic(self):
        first = extract_property_number("Johnson Ranch", "Johnson Ranch")
        second = extract_property_number("Johnson Ranch", "Johnson Ranch")

        assert first == second
        base, suffix = first.split("-")
        assert suffix == "1"
        assert len(base) == 6
        assert 100000 <= int(base) <= 999999


class TestProductType:
    """Tests for keyword based product detection."""

    @pytest.mark.parametrize(
        "description, expected",
        [
            ("Verde 13-2HZ NBRR GAS", ProductType.GAS),
            ("Natural Gas sales", ProductType.GAS),
            ("Crude sales", ProductType.OIL),
            ("Condensate", ProductType.NGL),
            ("Plant Products NGL", ProductType.NGL),
            ("Saltwater disposal", ProductType.WATER),
            ("Royalty payment", ProductType.OIL),
        ],
    )
    def test_detect(self, description, expected):
        assert detect_product_type(description) is expected

    def test_gas_before_oil(self):
        assert detect_product_type("Oil and gas revenue") is ProductType.GAS
