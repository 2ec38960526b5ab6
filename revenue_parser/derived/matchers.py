"""
Ordered pattern matchers for property metadata in line item descriptions.

Each matcher is a named strategy; the chains below are evaluated in order
from the most specific shape to the most general and the first match wins.
"""

import re
from dataclasses import dataclass
from typing import Optional

from revenue_parser.models.revenue import ProductType


@dataclass(frozen=True)
class PatternMatcher:
    """A named regular expression returning its first capture group."""
    name: str
    pattern: re.Pattern

    def match(self, text: str) -> Optional[str]:
        found = self.pattern.search(text)
        if found:
            value = found.group(1).strip()
            return value or None
        return None


def _matcher(name: str, pattern: str, flags: int = re.IGNORECASE) -> PatternMatcher:
    return PatternMatcher(name=name, pattern=re.compile(pattern, flags))


PROPERTY_NAME_MATCHERS = (
    # "Verde 13-2HZ NBRR"
    _matcher("training_shape", r"([A-Za-z]+\s+\d+-\d*[A-Za-z]*\s+[A-Za-z]+)"),
    # "Name 13-2HZ Type"
    _matcher("hz_well", r"([A-Za-z]+\s+\d+-\d*[Hh][Zz]?\s+[A-Za-z]+)"),
    # "Name 13-2H"
    _matcher("h_well", r"([A-Za-z]+\s+\d+-\d*[Hh])"),
    # "Name 13-24" / "Name 13-24H"
    _matcher("dash_number", r"([A-Za-z]+\s+\d+-\d+[Hh]?)"),
    # "Name 2H"
    _matcher("number_h", r"([A-Za-z]+\s+\d+[Hh])"),
    # Any word followed by a word/number token
    _matcher("general_two_token", r"([A-Za-z]+\s+[A-Za-z0-9\-]+)"),
)

PROPERTY_NUMBER_MATCHERS = (
    # "138366-1"
    _matcher("six_digit_dash", r"(\d{6}-\d+)", 0),
    _matcher("five_six_digit_dash", r"(\d{5,6}-\d+)", 0),
    _matcher("four_six_digit_dash", r"(\d{4,6}-\d+)", 0),
    _matcher("property_label", r"Property\s*#?\s*(\d+-?\d*)"),
    _matcher("well_label", r"Well\s*#?\s*(\d+-?\d*)"),
    _matcher("id_label", r"ID\s*#?\s*(\d+-?\d*)"),
    _matcher("bare_digits", r"(\d{3,})", 0),
)

NAME_SEPARATORS = (" - ", " – ", " | ", ": ", " / ", " for ", " FOR ")

GENERIC_NAME_WORDS = re.compile(r"\b(well|lease|unit|property)\b", re.IGNORECASE)

UNKNOWN_PROPERTY = "Unknown Property"

# Checked in order; the first product type with a keyword present wins
PRODUCT_KEYWORDS = (
    (ProductType.GAS, ("gas", "natural gas", "methane")),
    (ProductType.OIL, ("oil", "crude", "petroleum")),
    (ProductType.NGL, ("ngl", "liquid", "condensate", "propane", "butane")),
    (ProductType.WATER, ("water", "brine", "disposal")),
)


def first_match(matchers, text: str) -> tuple[Optional[str], Optional[str]]:
    """
    Run matchers in order.

    Returns:
        Tuple of (matched value, matcher name), or (None, None)
    """
    for matcher in matchers:
        value = matcher.match(text)
        if value:
            return value, matcher.name
    return None, None


def extract_property_name(description: str) -> str:
    """Best-effort well/property name from a description."""
    text = description.strip()
    name, _ = first_match(PROPERTY_NAME_MATCHERS, text)

    if not name:
        for separator in NAME_SEPARATORS:
            if separator in text:
                name = text.split(separator)[0].strip()
                break

    if not name:
        words = text.split()
        if len(words) >= 2:
            name = " ".join(words[:2])
        elif words:
            name = words[0]

    cleaned = " ".join(GENERIC_NAME_WORDS.sub("", name or "").split())
    return cleaned or UNKNOWN_PROPERTY


def string_hash(text: str) -> int:
    """31-based rolling hash over UTF-16 code units, as a signed 32-bit int."""
    data = text.encode("utf-16-le", "surrogatepass")
    value = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        value = (value * 31 + unit) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    return value


def synthesize_property_number(property_name: str) -> str:
    """Deterministic 6-digit property number with a "-1" suffix."""
    base = abs(string_hash(property_name)) % 900000 + 100000
    return f"{base}-1"


def extract_property_number(description: str, property_name: str) -> str:
    """Property number from the description, or one synthesized from the name."""
    number, _ = first_match(PROPERTY_NUMBER_MATCHERS, description)
    return number or synthesize_property_number(property_name)


def detect_product_type(description: str) -> ProductType:
    """Infer the product from keywords; oil when nothing matches."""
    text = description.lower()
    for product_type, keywords in PRODUCT_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return product_type
    return ProductType.OIL
