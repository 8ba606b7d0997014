"""
Parsers module for turning ledger uploads into travel records.
"""
from .base_parser import (
    BaseParser,
    IngestionResult,
    LedgerExtractionError,
    MalformedInputError,
    NoDataAfterHeaderError,
    OpeningBalance,
    PaymentStatus,
    TravelRecord,
)
from .sheet_reader import SheetReader, read_grid
from .layout_profiles import LayoutKind, classify_layout
from .ledger_parser import LedgerParser, process_ledger_file
from .upload_validator import (
    UploadRejectedError,
    UnsupportedFileError,
    FileTooLargeError,
    validate_upload,
)

__all__ = [
    'UploadRejectedError', 'UnsupportedFileError', 'FileTooLargeError', 'validate_upload',
    'BaseParser', 'IngestionResult', 'OpeningBalance', 'PaymentStatus', 'TravelRecord',
    'LedgerExtractionError', 'MalformedInputError', 'NoDataAfterHeaderError',
    'SheetReader', 'read_grid', 'LayoutKind', 'classify_layout',
    'LedgerParser', 'process_ledger_file',
]
