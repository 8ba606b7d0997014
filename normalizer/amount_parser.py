"""
Amount parser for ledger money columns.
"""
import math
import re
from typing import Any, Optional

# Cell texts that mean "no value" rather than zero
_EMPTY_MARKERS = ("", "-")

_CURRENCY_PATTERNS = [
    r'₹\s*',           # Rupee symbol
    r'Rs\.?\s*',       # Rs or Rs.
    r'INR\s*',
    r'AED\s*',
    r'PKR\s*',
    r'USD\s*',
    r'\$\s*',
    r'€\s*',
    r'£\s*',
]

_DR_SUFFIX = re.compile(r'\s*(DR|Dr|dr)\.?\s*$')
_CR_SUFFIX = re.compile(r'\s*(CR|Cr|cr)\.?\s*$')


def parse_amount(value: Any) -> Optional[float]:
    """
    Parse a monetary cell into a float.

    Handles:
    - Thousands separators: "12,500.00", "9,17,390.58"
    - Currency symbols: ₹, Rs, AED, PKR, $
    - Negative formats: -1000, (1000), 1000 DR

    Args:
        value: A cell value that might be an amount

    Returns:
        The amount, or None when the cell is empty, a bare "-",
        or not a number at all
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return float(value)

    value_str = str(value).strip()

    if value_str in _EMPTY_MARKERS:
        return None

    return _parse_amount_text(value_str)


def _parse_amount_text(value_str: str) -> Optional[float]:
    """
    Parse an amount string and apply its sign.

    Args:
        value_str: Raw amount string

    Returns:
        The signed amount, or None if the text is not numeric
    """
    is_negative = False

    dr_match = _DR_SUFFIX.search(value_str)
    cr_match = _CR_SUFFIX.search(value_str)

    if dr_match:
        is_negative = True
        value_str = value_str[:dr_match.start()]
    elif cr_match:
        value_str = value_str[:cr_match.start()]

    value_str = value_str.strip()

    # (1000) means negative
    if value_str.startswith('(') and value_str.endswith(')'):
        is_negative = True
        value_str = value_str[1:-1]

    if value_str.startswith('-'):
        is_negative = True
        value_str = value_str[1:]

    value_str = _remove_currency_symbols(value_str).strip()

    # Thousands separators (Indian and international grouping alike)
    value_str = value_str.replace(',', '').replace(' ', '')

    if not value_str:
        return None

    try:
        amount = float(value_str)
    except ValueError:
        return None

    if math.isnan(amount) or math.isinf(amount):
        return None

    return -abs(amount) if is_negative else amount


def _remove_currency_symbols(value_str: str) -> str:
    """
    Remove currency symbols from a string.

    Args:
        value_str: String potentially containing currency symbols

    Returns:
        String with currency symbols removed
    """
    for pattern in _CURRENCY_PATTERNS:
        value_str = re.sub(pattern, '', value_str, flags=re.IGNORECASE)
    return value_str


def has_valid_amount(value: Any) -> bool:
    """
    Check if a value contains a parseable amount.

    Args:
        value: A value to check

    Returns:
        True if the value contains a valid amount, False otherwise
    """
    return parse_amount(value) is not None


def is_formatted_amount(text: Any) -> bool:
    """
    Check for amount text written with a grouping comma or decimal point.

    "12,500.00" and "12500.5" qualify; "12500" and "01/01/2024" do not.
    """
    if text is None:
        return False
    text_str = str(text).strip()
    if ',' not in text_str and '.' not in text_str:
        return False
    try:
        float(text_str.replace(',', ''))
    except ValueError:
        return False
    return True
