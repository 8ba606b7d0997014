"""
Row normalizer: turns one positional ledger row into a TravelRecord.

Rows that cannot become a record are skipped, never raised on:
- Blank rows and rows with fewer than 4 populated cells
- Repeated column headers and "total" rows
- Rows without a date or voucher, or whose date cannot be parsed
"""
import logging
from datetime import date
from typing import Any, Optional, Sequence, Tuple

from config import (
    HEADER_ECHO_KEYWORDS,
    MIN_POPULATED_CELLS,
    SALES_MARKER,
    SKIP_ROW_KEYWORDS,
)
from extractor.strategies import TravelFields, extract_from_composite, extract_from_narration
from normalizer.amount_parser import parse_amount
from normalizer.date_parser import parse_date
from normalizer.flight_status import derive_flight_status
from parsers.base_parser import PaymentStatus, TravelRecord
from parsers.layout_profiles import LayoutProfile
from parsers.sheet_reader import cell_text, row_text

logger = logging.getLogger(__name__)

# Skip reasons
SKIP_BLANK = "blank_row"
SKIP_TOO_FEW_CELLS = "too_few_cells"
SKIP_HEADER_ECHO = "header_row"
SKIP_TOTAL_ROW = "total_row"
SKIP_MISSING_DATE = "missing_date"
SKIP_MISSING_VOUCHER = "missing_voucher"
SKIP_INVALID_DATE = "invalid_date"

NormalizedRow = Tuple[Optional[TravelRecord], Optional[str]]


class RowNormalizer:
    """
    Maps the positional columns of a data row to record fields.

    Column order: date, voucher, reference, narration, amount, credit,
    balance, composite. In raw ledgers the amount column holds either a
    debit or a "SALES - ..." booking description.
    """

    def __init__(self, profile: LayoutProfile, today: date):
        """
        Initialize the normalizer.

        Args:
            profile: Layout of the file being read
            today: Reference date for flight status
        """
        self.profile = profile
        self.today = today

    def normalize(self, row: Sequence[Any], row_number: int) -> NormalizedRow:
        """
        Normalize one row.

        Args:
            row: Raw cells
            row_number: 1-based row number in the sheet, for logging

        Returns:
            (record, None) for a kept row, (None, skip_reason) otherwise
        """
        reason = self._rejection_reason(row)
        if reason:
            return None, reason

        cells = self.profile.map_columns(row)

        date_cell = cells["date"]
        voucher = cell_text(cells["voucher"])

        if not cell_text(date_cell):
            return None, SKIP_MISSING_DATE
        if not voucher:
            return None, SKIP_MISSING_VOUCHER

        record_date = parse_date(date_cell)
        if record_date is None:
            logger.warning("Skipping row %d with invalid date: %r", row_number, date_cell)
            return None, SKIP_INVALID_DATE

        narration = cell_text(cells["narration"]) or None
        debit, fields = self._amount_and_travel_fields(cells, narration)

        record = TravelRecord(
            date=record_date,
            voucher=voucher,
            reference=cell_text(cells["reference"]) or None,
            narration=narration,
            debit=debit,
            credit=parse_amount(cells["credit"]),
            balance=parse_amount(cells["balance"]),
            customer_name=fields.customer_name,
            route=fields.route,
            pnr=fields.pnr,
            flying_date=fields.flying_date,
            flight_status=derive_flight_status(fields.flying_date, self.today),
            customer_rate=0,
            company_rate=0,
            profit=0,
            payment_status=PaymentStatus.PENDING,
            row_number=row_number,
        )
        return record, None

    def _rejection_reason(self, row: Sequence[Any]) -> Optional[str]:
        """
        Check whether a row is structurally not a data row.

        Args:
            row: Raw cells

        Returns:
            Skip reason, or None for a candidate data row
        """
        populated = sum(1 for cell in row if cell_text(cell))
        if populated == 0:
            return SKIP_BLANK
        if populated < MIN_POPULATED_CELLS:
            return SKIP_TOO_FEW_CELLS

        text = row_text(row).casefold()

        if all(keyword in text for keyword in HEADER_ECHO_KEYWORDS):
            return SKIP_HEADER_ECHO

        if any(keyword in text for keyword in SKIP_ROW_KEYWORDS):
            return SKIP_TOTAL_ROW

        return None

    def _amount_and_travel_fields(
        self, cells: dict, narration: Optional[str]
    ) -> Tuple[Optional[float], TravelFields]:
        """
        Read the debit and pick the cell the travel details come from.

        Raw ledger SALES text in the amount column wins; otherwise the
        composite column is used when present, and the narration last.
        """
        amount_cell = cells["amount"]
        amount_text = cell_text(amount_cell)

        if self.profile.sales_in_amount_column and SALES_MARKER in amount_text.upper():
            return None, extract_from_narration(amount_text)

        debit = parse_amount(amount_cell)

        composite = cell_text(cells["composite"])
        if composite:
            return debit, extract_from_composite(composite)
        return debit, extract_from_narration(narration)
