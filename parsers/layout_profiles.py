"""
Layout profiles for the two kinds of ledger upload.

Ledger files arrive in one of two shapes:
- Raw ledger: a bank/accounting export with a multi-row preamble and an
  overloaded 5th column that may carry "SALES - ..." booking text
- Standard travel sheet: a fixed 3-row header followed by the data

Each shape gets a profile describing where its data starts and how its
columns are read; the classifier picks the profile for an uploaded grid.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config import (
    HEADER_ROWS_TO_SKIP,
    RAW_FILENAME_MARKER,
    RAW_LEDGER_MARKERS,
    RAW_PREAMBLE_WINDOW,
    STANDARD_PREAMBLE_WINDOW,
)
from parsers.sheet_reader import cell_text


class LayoutKind(Enum):
    """Source layout of an uploaded ledger."""
    RAW_LEDGER = "raw_ledger"
    STANDARD_SHEET = "standard_sheet"


# Positional column order shared by both layouts. In a raw ledger the
# "amount" column is either a debit or a SALES description.
LEDGER_COLUMNS: Tuple[str, ...] = (
    "date",
    "voucher",
    "reference",
    "narration",
    "amount",
    "credit",
    "balance",
    "composite",
)


@dataclass(frozen=True)
class LayoutProfile:
    """
    Configuration profile for one ledger layout.
    """
    kind: LayoutKind
    name: str
    header_rows_to_skip: int
    preamble_window: int

    # True if the 5th column may hold SALES text instead of a debit
    sales_in_amount_column: bool = False

    columns: Tuple[str, ...] = LEDGER_COLUMNS

    def map_columns(self, row: Sequence[Any]) -> Dict[str, Any]:
        """Name the positional cells of a row, padding short rows with None."""
        return {
            name: (row[i] if i < len(row) else None)
            for i, name in enumerate(self.columns)
        }


RAW_LEDGER_PROFILE = LayoutProfile(
    kind=LayoutKind.RAW_LEDGER,
    name="Raw ledger export",
    header_rows_to_skip=HEADER_ROWS_TO_SKIP,
    preamble_window=RAW_PREAMBLE_WINDOW,
    sales_in_amount_column=True,
)

STANDARD_SHEET_PROFILE = LayoutProfile(
    kind=LayoutKind.STANDARD_SHEET,
    name="Standard travel sheet",
    header_rows_to_skip=HEADER_ROWS_TO_SKIP,
    preamble_window=STANDARD_PREAMBLE_WINDOW,
)

_PROFILES: Dict[LayoutKind, LayoutProfile] = {
    LayoutKind.RAW_LEDGER: RAW_LEDGER_PROFILE,
    LayoutKind.STANDARD_SHEET: STANDARD_SHEET_PROFILE,
}

_MARKERS: List[str] = [" ".join(m.split()).casefold() for m in RAW_LEDGER_MARKERS]


def get_layout_profile(kind: LayoutKind) -> LayoutProfile:
    """Get the profile for a layout kind."""
    return _PROFILES[kind]


def _normalize(value: Any) -> str:
    return " ".join(cell_text(value).split()).casefold()


def _first_populated_cell(row: Sequence[Any]) -> Optional[Any]:
    for cell in row:
        if cell_text(cell):
            return cell
    return None


def classify_layout(grid: Sequence[Sequence[Any]], filename: str) -> LayoutKind:
    """
    Decide which ingestion strategy applies to a grid.

    A file is a raw ledger if its name contains "raw", or if the leading
    cell of any row carries one of the exporter markers ("All Ledgers",
    "TRAVELS", "Statement Period"). Whitespace and case are ignored.
    Anything else is a standard sheet.

    Args:
        grid: Decoded cells
        filename: Original file name

    Returns:
        LayoutKind
    """
    if RAW_FILENAME_MARKER in (filename or "").casefold():
        return LayoutKind.RAW_LEDGER

    for row in grid:
        leading = _first_populated_cell(row)
        if leading is None:
            continue
        text = _normalize(leading)
        if any(marker in text for marker in _MARKERS):
            return LayoutKind.RAW_LEDGER

    return LayoutKind.STANDARD_SHEET


def detect_layout(grid: Sequence[Sequence[Any]], filename: str) -> LayoutProfile:
    """Classify a grid and return the matching profile."""
    return get_layout_profile(classify_layout(grid, filename))
