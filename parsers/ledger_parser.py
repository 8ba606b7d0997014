"""
Ledger parser: runs the whole extraction pipeline for one upload.

reader -> layout classifier -> preamble scanner -> row normalizer -> summary
"""
import logging
from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from aggregator.summary import SummaryAggregator
from config import get_chunk_size
from parsers.base_parser import (
    BaseParser,
    IngestionResult,
    NoDataAfterHeaderError,
    ValidationIssue,
)
from parsers.layout_profiles import LayoutProfile, detect_layout
from parsers.preamble import PreambleScan, scan_preamble
from parsers.row_normalizer import RowNormalizer
from parsers.sheet_reader import SheetReader

logger = logging.getLogger(__name__)


class LedgerParser(BaseParser):
    """
    Parser for ledger spreadsheets holding travel bookings.

    Holds no state between uploads; one instance parses one file.
    """

    def __init__(
        self,
        buffer: bytes,
        filename: str,
        today: Optional[date] = None,
        chunk_size: Optional[int] = None,
    ):
        """
        Initialize the ledger parser.

        Args:
            buffer: Raw file content
            filename: Original file name (drives format and layout detection)
            today: Reference "now" for flight status and the default
                   opening balance date (defaults to the current date)
            chunk_size: Rows per read window (defaults to config)
        """
        super().__init__(filename)
        self.buffer = buffer
        self.today = today or date.today()
        self.chunk_size = chunk_size or get_chunk_size()

        self.profile: Optional[LayoutProfile] = None
        self.preamble: Optional[PreambleScan] = None
        self._skipped_rows: List[ValidationIssue] = []
        self._skip_reasons: Counter = Counter()

    def parse(self) -> IngestionResult:
        """
        Read the buffer and extract its records.

        Returns:
            IngestionResult

        Raises:
            MalformedInputError: If the buffer is not a readable spreadsheet
            NoDataAfterHeaderError: If nothing follows the title rows
        """
        logger.info("Parsing ledger file: %s", self.filename)

        reader = SheetReader(chunk_size=self.chunk_size)
        grid = reader.read(self.buffer, self.filename)
        logger.debug("Read %d rows in %d window(s)", len(grid), reader.chunks_read)

        return self.parse_grid(grid)

    def parse_grid(self, grid: Sequence[Sequence[Any]]) -> IngestionResult:
        """
        Extract records from an already decoded grid.

        Args:
            grid: Rows of raw cells

        Returns:
            IngestionResult
        """
        self.profile = detect_layout(grid, self.filename)
        logger.info("Detected layout: %s", self.profile.name)

        if len(grid) <= self.profile.header_rows_to_skip:
            raise NoDataAfterHeaderError(
                f"No data found after removing {self.profile.header_rows_to_skip} header rows"
            )

        self.preamble = scan_preamble(grid, self.profile, self.today)
        if self.preamble.opening_balance is None:
            logger.info("No opening balance found")

        normalizer = RowNormalizer(self.profile, self.today)
        self._records = []
        self._skipped_rows = []
        self._skip_reasons = Counter()

        for idx in range(self.preamble.data_start, len(grid)):
            row_number = idx + 1
            record, reason = normalizer.normalize(grid[idx], row_number)

            if record is None:
                self._skip_reasons[reason] += 1
                self._skipped_rows.append(ValidationIssue(
                    row_numbers=[row_number],
                    issue_type=reason,
                    message=f"Row {row_number} skipped: {reason}",
                ))
                logger.debug("Row %d skipped: %s", row_number, reason)
                continue

            self._records.append(record)

        summary = SummaryAggregator().summarize(self._records)

        logger.info(
            "Extracted %d records from %s (%d rows skipped, opening balance %s)",
            len(self._records),
            self.filename,
            len(self._skipped_rows),
            "found" if self.preamble.opening_balance else "not found",
        )

        return IngestionResult(
            filename=self.filename,
            layout=self.profile.kind.value,
            opening_balance=self.preamble.opening_balance,
            records=tuple(self._records),
            summary=summary,
            total_rows=len(grid) - self.preamble.data_start,
            skipped_rows=len(self._skipped_rows),
        )

    @property
    def skipped_rows(self) -> List[ValidationIssue]:
        """Rows left out of the result, with the reason for each."""
        return self._skipped_rows

    @property
    def skip_reasons(self) -> Dict[str, int]:
        """Skipped-row count per reason."""
        return dict(self._skip_reasons)


def process_ledger_file(
    buffer: bytes,
    filename: str,
    today: Optional[date] = None,
    chunk_size: Optional[int] = None,
) -> IngestionResult:
    """
    Run the extraction pipeline on an uploaded file.

    Args:
        buffer: Raw file content
        filename: Original file name
        today: Reference "now" (defaults to the current date)
        chunk_size: Rows per read window (defaults to config)

    Returns:
        IngestionResult
    """
    return LedgerParser(buffer, filename, today=today, chunk_size=chunk_size).parse()
