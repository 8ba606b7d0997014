"""
Sheet reader for uploaded ledger files.

Turns a spreadsheet byte buffer into a rectangular grid of raw cells
(strings, numbers, datetimes or None) for the first sheet only.

Handles:
- XLSX workbooks, streamed in fixed-size row windows
- Legacy XLS workbooks (through pandas)
- CSV exports, with encoding fallback
"""
import csv
import io
import logging
import math
import zipfile
from datetime import date, datetime
from itertools import islice
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Sequence

import pandas as pd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from config import FILE_ENCODINGS, READ_CHUNK_SIZE
from parsers.base_parser import MalformedInputError

logger = logging.getLogger(__name__)

Grid = List[List[Any]]

_XLSX_SIGNATURE = b"PK\x03\x04"
_XLS_SIGNATURE = b"\xd0\xcf\x11\xe0"

# Errors openpyxl raises for damaged workbooks, while opening or while streaming
_WORKBOOK_ERRORS = (
    zipfile.BadZipFile,
    InvalidFileException,
    KeyError,
    ValueError,
    OSError,
    SyntaxError,  # xml.etree.ElementTree.ParseError
)


def detect_format(buffer: bytes, filename: str) -> str:
    """
    Decide how to decode a buffer.

    The extension wins; unknown extensions fall back to sniffing the
    file signature.

    Args:
        buffer: Raw file content
        filename: Original file name

    Returns:
        'xlsx', 'xls' or 'csv'
    """
    ext = Path(filename or "").suffix.lower()
    if ext in ('.xlsx', '.xlsm'):
        return 'xlsx'
    elif ext == '.xls':
        return 'xls'
    elif ext in ('.csv', '.txt'):
        return 'csv'

    if buffer.startswith(_XLSX_SIGNATURE):
        return 'xlsx'
    if buffer.startswith(_XLS_SIGNATURE):
        return 'xls'
    return 'csv'


class SheetReader:
    """
    Reads the first sheet of a workbook into a grid, one window of rows
    at a time.
    """

    def __init__(self, chunk_size: int = READ_CHUNK_SIZE):
        """
        Initialize the reader.

        Args:
            chunk_size: Number of rows pulled from the source per window
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.chunk_size = chunk_size
        self.chunks_read = 0
        self.detected_format: Optional[str] = None
        self.encoding: Optional[str] = None

    def read(self, buffer: bytes, filename: str) -> Grid:
        """
        Decode a spreadsheet buffer into a rectangular grid.

        Args:
            buffer: Raw file content
            filename: Original file name

        Returns:
            List of rows, all padded to the same width. An empty sheet
            gives an empty list.

        Raises:
            MalformedInputError: If the buffer cannot be decoded
        """
        self.chunks_read = 0
        self.detected_format = detect_format(buffer, filename)
        logger.debug("Reading %s as %s", filename, self.detected_format)

        if self.detected_format == 'xlsx':
            windows = self._iter_xlsx_windows(buffer)
        elif self.detected_format == 'xls':
            windows = self._iter_xls_windows(buffer)
        else:
            windows = self._iter_csv_windows(buffer)

        grid: Grid = []
        for window in windows:
            self.chunks_read += 1
            grid.extend([_clean_cell(cell) for cell in row] for row in window)

        grid = _make_rectangular(grid)
        logger.debug(
            "Read %d rows from %s in %d window(s)", len(grid), filename, self.chunks_read
        )
        return grid

    def _windows(self, rows: Iterable[Sequence[Any]]) -> Iterator[List[Sequence[Any]]]:
        """Split a row iterator into lists of at most chunk_size rows."""
        iterator = iter(rows)
        while True:
            window = list(islice(iterator, self.chunk_size))
            if not window:
                return
            yield window

    def _iter_xlsx_windows(self, buffer: bytes) -> Iterator[List[Sequence[Any]]]:
        """Stream rows out of an XLSX workbook."""
        try:
            workbook = load_workbook(io.BytesIO(buffer), read_only=True, data_only=True)
        except _WORKBOOK_ERRORS as e:
            raise MalformedInputError(f"Could not open workbook: {e}") from e

        try:
            if not workbook.worksheets:
                return
            worksheet = workbook.worksheets[0]
            try:
                yield from self._windows(worksheet.iter_rows(values_only=True))
            except _WORKBOOK_ERRORS as e:
                raise MalformedInputError(f"Could not read worksheet: {e}") from e
        finally:
            workbook.close()

    def _iter_xls_windows(self, buffer: bytes) -> Iterator[List[Sequence[Any]]]:
        """Read a legacy XLS workbook and hand it out in windows."""
        try:
            frame = pd.read_excel(io.BytesIO(buffer), sheet_name=0, header=None)
        except ImportError:
            raise
        except Exception as e:
            raise MalformedInputError(f"Could not read XLS workbook: {e}") from e

        for start in range(0, len(frame), self.chunk_size):
            window = frame.iloc[start:start + self.chunk_size]
            yield [
                tuple(_from_pandas(value) for value in row)
                for row in window.itertuples(index=False, name=None)
            ]

    def _iter_csv_windows(self, buffer: bytes) -> Iterator[List[Sequence[Any]]]:
        """Read a CSV export with encoding fallback."""
        text = self._decode(buffer)
        reader = csv.reader(io.StringIO(text, newline=''))
        try:
            yield from self._windows(reader)
        except csv.Error as e:
            raise MalformedInputError(f"Could not parse CSV: {e}") from e

    def _decode(self, buffer: bytes) -> str:
        """
        Decode CSV bytes with the first encoding that works.

        Returns:
            Decoded text
        """
        for encoding in FILE_ENCODINGS:
            try:
                text = buffer.decode(encoding)
            except UnicodeDecodeError:
                continue
            self.encoding = encoding
            logger.debug("Decoded CSV with encoding: %s", encoding)
            return text

        raise MalformedInputError("Could not decode CSV with any supported encoding")


def cell_text(value: Any) -> str:
    """
    Render a raw cell as text.

    Dates become ISO strings and whole floats lose their ".0", so
    numeric and date cells read the same way they were typed.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat(sep=' ')
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def row_text(row: Sequence[Any]) -> str:
    """Join the populated cells of a row with single spaces."""
    return " ".join(text for text in (cell_text(cell) for cell in row) if text)


def _clean_cell(value: Any) -> Any:
    """Map blank strings and NaN to None; keep everything else as-is."""
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _from_pandas(value: Any) -> Any:
    """Convert pandas/numpy scalars back to plain Python values."""
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.to_pydatetime()
    if isinstance(value, (str, datetime, date)):
        return value
    if pd.isna(value):
        return None
    if hasattr(value, 'item'):
        return value.item()
    return value


def _make_rectangular(grid: Grid) -> Grid:
    """Drop trailing blank rows and pad every row to the same width."""
    while grid and all(cell is None for cell in grid[-1]):
        grid.pop()

    width = max((len(row) for row in grid), default=0)
    for row in grid:
        if len(row) < width:
            row.extend([None] * (width - len(row)))
    return grid


def read_grid(buffer: bytes, filename: str, chunk_size: int = READ_CHUNK_SIZE) -> Grid:
    """
    Convenience wrapper around SheetReader.read().

    Args:
        buffer: Raw file content
        filename: Original file name
        chunk_size: Rows per read window

    Returns:
        Rectangular grid of raw cells
    """
    return SheetReader(chunk_size=chunk_size).read(buffer, filename)
