"""
Parsing utilities for normalizing extracted data.

Handles whitespace cleanup and civil-date parsing from the many ways
municipal sites write a date. Every date is emitted as ``dd/mm/yyyy`` or
the empty string.
"""

from __future__ import annotations

import calendar
import re
from datetime import date

import dateparser


# =============================================================================
# Text Utilities
# =============================================================================


def normalize_whitespace(text: str | None) -> str:
    """Normalize whitespace in text."""
    if text is None:
        return ""
    return " ".join(str(text).split())


def clean_html_text(text: str | None) -> str:
    """Clean text extracted from HTML."""
    if text is None:
        return ""

    # Leftover entities from badly encoded pages
    text = re.sub(r"&nbsp;?", " ", text)
    text = re.sub(r"&amp;?", "&", text)
    text = re.sub(r"&#39;?", "'", text)
    text = text.replace("\xa0", " ")

    return normalize_whitespace(text)


# =============================================================================
# Date Parsing
# =============================================================================


CANONICAL_DATE = re.compile(r"^\d{2}/\d{2}/\d{4}$")

MONTHS: dict[str, int] = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
}

_MONTH_NAMES = (
    r"January|February|March|April|May|June|July|August|September|October|November|December"
    r"|Sept|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sep|Oct|Nov|Dec"
)

_NUMERIC_DATE = re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b")
_ISO_DATE = re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b")
# Also covers weekday-prefixed forms ("Monday, 3 March 2025") since the
# search is unanchored.
_DAY_MONTH_YEAR = re.compile(
    rf"\b(\d{{1,2}})(?:st|nd|rd|th)?\s+({_MONTH_NAMES})\.?,?\s+(\d{{4}})\b",
    re.IGNORECASE,
)
_MONTH_DAY_YEAR = re.compile(
    rf"\b({_MONTH_NAMES})\.?\s+(\d{{1,2}})(?:st|nd|rd|th)?,?\s+(\d{{4}})\b",
    re.IGNORECASE,
)

_DATEPARSER_SETTINGS = {
    "DATE_ORDER": "MDY",
    "PREFER_DAY_OF_MONTH": "first",
    "RETURN_AS_TIMEZONE_AWARE": False,
    "STRICT_PARSING": True,
}


def format_date(year: int, month: int, day: int) -> str:
    """Format a civil date as dd/mm/yyyy, or "" if it does not exist."""
    try:
        value = date(year, month, day)
    except ValueError:
        return ""
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def is_canonical_date(value: str | None) -> bool:
    """Check that a value is an existing date in dd/mm/yyyy form."""
    if not value or not CANONICAL_DATE.match(value):
        return False
    day, month, year = (int(part) for part in value.split("/"))
    return bool(format_date(year, month, day))


def month_number(name: str) -> int | None:
    """Map a full or abbreviated English month name to its number."""
    key = name.lower().rstrip(".")
    if key.startswith("sept"):
        return 9
    return MONTHS.get(key[:3])


def normalize_date(text: str | None, *, day_first: bool = True) -> str:
    """Extract the first recognizable civil date from free text.

    Detection order:
    - numeric ``d/m/yyyy`` (zero-padded on output)
    - ISO ``yyyy-mm-dd``
    - ``D Month YYYY`` with full or abbreviated month names, including
      weekday-prefixed variants
    - month-first ``Month D, YYYY`` (resolved with dateparser)

    A form that matches but names a day that does not exist (31/02/2025)
    falls through to the next form.

    Args:
        text: Arbitrary text that may contain a date
        day_first: Read numeric dates as day/month (South African
            convention) rather than month/day

    Returns:
        ``dd/mm/yyyy`` string, or "" when nothing usable was found
    """
    t = normalize_whitespace(text)
    if not t:
        return ""

    match = _NUMERIC_DATE.search(t)
    if match:
        first, second, year = int(match.group(1)), int(match.group(2)), int(match.group(3))
        day, month = (first, second) if day_first else (second, first)
        result = format_date(year, month, day)
        if result:
            return result

    match = _ISO_DATE.search(t)
    if match:
        result = format_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        if result:
            return result

    match = _DAY_MONTH_YEAR.search(t)
    if match:
        month = month_number(match.group(2))
        if month:
            result = format_date(int(match.group(3)), month, int(match.group(1)))
            if result:
                return result

    match = _MONTH_DAY_YEAR.search(t)
    if match:
        month = month_number(match.group(1))
        if month:
            return _parse_month_first(
                f"{calendar.month_name[month]} {int(match.group(2))}, {match.group(3)}"
            )

    return ""


def _parse_month_first(fragment: str) -> str:
    """Resolve an isolated ``Month D, YYYY`` fragment via dateparser."""
    parsed = dateparser.parse(
        fragment,
        languages=["en"],
        settings=_DATEPARSER_SETTINGS,
    )
    if parsed is None:
        return ""
    return format_date(parsed.year, parsed.month, parsed.day)
