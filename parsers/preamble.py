"""
Preamble scanning: finds the opening balance declared above the data rows
and the index where the data itself starts.

The two layouts write their opening balance differently, so each has its
own scanner:
- Raw ledgers put the amount in a comma/decimal formatted cell and the
  date as DD/MM/YYYY (or not at all)
- Standard sheets carry an ISO date and a plain number in the same row
"""
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional, Sequence

from config import OPENING_BALANCE_KEYWORDS
from normalizer.amount_parser import is_formatted_amount
from normalizer.date_parser import ISO_DATE_PATTERN, find_dmy_date, find_iso_date
from parsers.base_parser import OpeningBalance
from parsers.layout_profiles import LayoutKind, LayoutProfile
from parsers.sheet_reader import cell_text, row_text

logger = logging.getLogger(__name__)

# Plain number, optionally grouped with commas
_AMOUNT_PATTERN = re.compile(r'-?\d[\d,]*(?:\.\d+)?')

Grid = Sequence[Sequence[Any]]


@dataclass(frozen=True)
class PreambleScan:
    """Outcome of scanning a file's preamble."""
    opening_balance: Optional[OpeningBalance]
    data_start: int                   # grid index of the first data row
    balance_row: Optional[int] = None  # grid index of the balance row, if any


def _mentions_opening_balance(text: str) -> bool:
    lowered = text.casefold()
    return any(keyword in lowered for keyword in OPENING_BALANCE_KEYWORDS)


def _first_formatted_amount(row: Sequence[Any]) -> Optional[float]:
    """
    Find the first comma/decimal formatted number in a row.

    Cells are split on whitespace so a free-text cell such as
    "Opening Balance 12,500.00" still yields its amount.
    """
    for cell in row:
        for token in cell_text(cell).split():
            if is_formatted_amount(token):
                return float(token.replace(',', ''))
    return None


def _first_dmy_date(row: Sequence[Any]) -> Optional[date]:
    for cell in row:
        if isinstance(cell, datetime):
            return cell.date()
        if isinstance(cell, date):
            return cell
        found = find_dmy_date(cell_text(cell))
        if found:
            return found
    return None


def scan_raw_ledger_preamble(grid: Grid, profile: LayoutProfile, today: date) -> PreambleScan:
    """
    Look for the opening balance of a raw ledger export.

    After the fixed title rows, up to ``profile.preamble_window`` rows are
    checked for "opening"/"balance". The first such row that also holds a
    formatted amount is the balance row; its DD/MM/YYYY date is used, or
    ``today`` when the row has none.

    Args:
        grid: Decoded cells
        profile: Raw ledger profile
        today: Fallback balance date

    Returns:
        PreambleScan
    """
    skip = profile.header_rows_to_skip
    end = min(skip + profile.preamble_window, len(grid))

    for idx in range(skip, end):
        row = grid[idx]
        text = row_text(row)
        if not text or not _mentions_opening_balance(text):
            continue

        amount = _first_formatted_amount(row)
        if amount is None:
            continue

        balance_date = _first_dmy_date(row) or today
        logger.debug("Opening balance %.2f on %s found at row %d", amount, balance_date, idx + 1)
        return PreambleScan(
            opening_balance=OpeningBalance(date=balance_date, amount=amount),
            data_start=idx + 1,
            balance_row=idx,
        )

    return PreambleScan(opening_balance=None, data_start=skip)


def scan_standard_sheet_preamble(grid: Grid, profile: LayoutProfile, today: date) -> PreambleScan:
    """
    Look for the opening balance of a standard travel sheet.

    A balance row mentions "opening"/"balance" and carries both an ISO
    date and a number somewhere in its text. ``today`` is not used: a
    row without a date is not a balance row in this layout.

    Args:
        grid: Decoded cells
        profile: Standard sheet profile
        today: Unused, kept for a uniform scanner signature

    Returns:
        PreambleScan
    """
    skip = profile.header_rows_to_skip
    end = min(skip + profile.preamble_window, len(grid))

    for idx in range(skip, end):
        text = row_text(grid[idx])
        if not text or not _mentions_opening_balance(text):
            continue

        date_match = ISO_DATE_PATTERN.search(text)
        if not date_match:
            continue
        balance_date = find_iso_date(date_match.group(0))
        if balance_date is None:
            continue

        # The year must not be mistaken for the amount
        remainder = f"{text[:date_match.start()]} {text[date_match.end():]}"
        amount_match = _AMOUNT_PATTERN.search(remainder)
        if not amount_match:
            continue

        amount = float(amount_match.group(0).replace(',', ''))
        logger.debug("Opening balance %.2f on %s found at row %d", amount, balance_date, idx + 1)
        return PreambleScan(
            opening_balance=OpeningBalance(date=balance_date, amount=amount),
            data_start=idx + 1,
            balance_row=idx,
        )

    return PreambleScan(opening_balance=None, data_start=skip)


_SCANNERS: Dict[LayoutKind, Callable[[Grid, LayoutProfile, date], PreambleScan]] = {
    LayoutKind.RAW_LEDGER: scan_raw_ledger_preamble,
    LayoutKind.STANDARD_SHEET: scan_standard_sheet_preamble,
}


def scan_preamble(grid: Grid, profile: LayoutProfile, today: date) -> PreambleScan:
    """
    Run the preamble scanner that belongs to the profile's layout.

    Args:
        grid: Decoded cells
        profile: Layout profile chosen by the classifier
        today: Reference date for layouts that default the balance date

    Returns:
        PreambleScan
    """
    return _SCANNERS[profile.kind](grid, profile, today)
