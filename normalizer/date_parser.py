"""
Date parser for the date formats found in ledger exports and travel sheets.
"""
import re
from datetime import date, datetime
from typing import Any, Optional

from dateutil import parser as dateutil_parser

from config import DATE_FORMATS

# DD/MM/YYYY anywhere in a string
DMY_DATE_PATTERN = re.compile(r'(?<!\d)(\d{1,2})/(\d{1,2})/(\d{4})(?!\d)')

# YYYY-MM-DD anywhere in a string
ISO_DATE_PATTERN = re.compile(r'(?<!\d)(\d{4})-(\d{2})-(\d{2})(?!\d)')

# dateutil fills missing components from its default; parsing against two
# defaults that differ in day, month and year exposes any filled-in part
_DATEUTIL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date value from various formats into a Python date object.

    Accepts native date/datetime cells (including pandas Timestamps),
    slash-delimited DD/MM/YYYY, ISO and the other DATE_FORMATS.

    Args:
        value: A cell value that might be a date

    Returns:
        A date object if parsing succeeds, None otherwise
    """
    if value is None:
        return None

    # If already a date or datetime object
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    # Bare numbers are amounts or serials, never dates here
    if isinstance(value, (int, float)):
        return None

    value_str = _normalize_date_string(str(value))

    if not value_str:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value_str, fmt).date()
        except ValueError:
            continue

    # "2024-01-15 00:00:00" and similar timestamp renderings
    iso_match = ISO_DATE_PATTERN.match(value_str)
    if iso_match:
        return _build_date(*iso_match.groups())

    return _parse_complete_date(value_str)


def _parse_complete_date(value_str: str) -> Optional[date]:
    """
    Parse free-form text with dateutil, accepting it only when the text
    itself names a day, a month and a year ("5", "Jan" and "Monday" do not).
    """
    try:
        first, second = (
            dateutil_parser.parse(value_str, dayfirst=True, default=default).date()
            for default in _DATEUTIL_DEFAULTS
        )
    except (ValueError, OverflowError):
        return None

    if first != second:
        return None
    return first


def _normalize_date_string(value: str) -> str:
    """
    Normalize a date string by cleaning up whitespace and separators.

    Args:
        value: Raw date string

    Returns:
        Normalized date string
    """
    value = " ".join(value.split())

    # "15/01-2025" -> "15/01/2025", but leave "15-Jan-2025" alone
    if "/" in value and "-" in value and not any(c.isalpha() for c in value):
        value = value.replace("-", "/")

    return value


def _build_date(year: str, month: str, day: str) -> Optional[date]:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_dmy(text: Optional[str]) -> Optional[date]:
    """
    Convert a DD/MM/YYYY string to a date.

    Single-digit days and months are accepted ("6/1/2024").
    """
    if not text:
        return None
    parts = str(text).strip().split("/")
    if len(parts) != 3 or not all(p.strip().isdigit() for p in parts):
        return None
    day, month, year = (p.strip() for p in parts)
    if len(year) != 4:
        return None
    return _build_date(year, month, day)


def find_dmy_date(text: Optional[str]) -> Optional[date]:
    """Find the first DD/MM/YYYY date embedded in free text."""
    if not text:
        return None
    match = DMY_DATE_PATTERN.search(str(text))
    if not match:
        return None
    day, month, year = match.groups()
    return _build_date(year, month, day)


def find_iso_date(text: Optional[str]) -> Optional[date]:
    """Find the first YYYY-MM-DD date embedded in free text."""
    if not text:
        return None
    match = ISO_DATE_PATTERN.search(str(text))
    if not match:
        return None
    return _build_date(*match.groups())


def is_valid_date(value: Any) -> bool:
    """
    Check if a value can be parsed as a valid date.

    Args:
        value: A value to check

    Returns:
        True if the value is a valid date, False otherwise
    """
    return parse_date(value) is not None


def to_iso(value: Optional[date]) -> Optional[str]:
    """Render a date as YYYY-MM-DD, passing None through."""
    if value is None:
        return None
    return value.isoformat()
