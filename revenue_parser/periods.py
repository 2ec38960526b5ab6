"""
Reporting period helpers.

Statements report periods as free text ("December 2021", "Q4 2023",
"Dec 2021 Production"). These helpers map that text onto concrete dates.
"""

import calendar
import re
from datetime import date
from typing import Optional

MONTH_PATTERN = re.compile(
    r"\b(jan|feb|mar|apr|may|jun|jul|aug|sept|sep|oct|nov|dec)[a-z]*\.?(?=\W|\d|$)",
    re.IGNORECASE,
)
QUARTER_PATTERN = re.compile(r"\bQ([1-4])\b", re.IGNORECASE)
YEAR_PATTERN = re.compile(r"(?<!\d)(\d{4})(?!\d)")

MONTH_ABBREVIATIONS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
}


def _year(period: str, today: date) -> int:
    years = YEAR_PATTERN.findall(period)
    return int(years[-1]) if years else today.year


def _month_range(period: str) -> Optional[tuple[int, int]]:
    """First and last month covered by the period text, if recognizable."""
    # A quarter wins over month names listed beside it ("Q4 2023 (Oct - Dec)")
    quarter = QUARTER_PATTERN.search(period)
    if quarter:
        last = int(quarter.group(1)) * 3
        return last - 2, last

    for match in MONTH_PATTERN.finditer(period):
        word = match.group(0).rstrip(".").lower()
        month = MONTH_ABBREVIATIONS[match.group(1).lower()]
        # Only accept real month names, not words that share a prefix ("market")
        if word == calendar.month_name[month].lower() or word == match.group(1).lower():
            return month, month
    return None


def period_end_date(period: str, today: Optional[date] = None) -> date:
    """
    Last day of the reporting period.

    Unrecognized periods map to December 31 of the current year.
    """
    today = today or date.today()
    months = _month_range(period or "")
    if months is None:
        return date(today.year, 12, 31)

    year = _year(period, today)
    last_month = months[1]
    return date(year, last_month, calendar.monthrange(year, last_month)[1])


def production_date(period: str, today: Optional[date] = None) -> date:
    """
    First day of the reporting period.

    Unrecognized periods map to today.
    """
    today = today or date.today()
    months = _month_range(period or "")
    if months is None:
        return today
    return date(_year(period, today), months[0], 1)
