"""
Record types and the abstract base class for ledger parsers.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from aggregator.summary import IngestionSummary
from normalizer.flight_status import FlightStatus


class PaymentStatus(str, Enum):
    """Settlement status of a booking."""
    PAID = "Paid"
    PENDING = "Pending"
    PARTIAL = "Partial"


@dataclass
class TravelRecord:
    """
    Represents one normalized travel booking taken from a ledger row.
    """
    date: date
    voucher: str
    reference: Optional[str] = None
    narration: Optional[str] = None
    debit: Optional[float] = None
    credit: Optional[float] = None
    balance: Optional[float] = None

    # Travel details recovered from composite/narration text
    customer_name: Optional[str] = None
    route: Optional[str] = None
    pnr: Optional[str] = None
    flying_date: Optional[date] = None
    flight_status: FlightStatus = FlightStatus.COMING

    # Filled in later by a reviewer
    customer_rate: float = 0
    company_rate: float = 0
    profit: float = 0
    payment_status: PaymentStatus = PaymentStatus.PENDING

    row_number: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to a JSON-ready dictionary."""
        return {
            'date': self.date.isoformat(),
            'voucher': self.voucher,
            'reference': self.reference,
            'narration': self.narration,
            'debit': self.debit,
            'credit': self.credit,
            'balance': self.balance,
            'customer_name': self.customer_name,
            'route': self.route,
            'pnr': self.pnr,
            'flying_date': self.flying_date.isoformat() if self.flying_date else None,
            'flight_status': self.flight_status.value,
            'customer_rate': self.customer_rate,
            'company_rate': self.company_rate,
            'profit': self.profit,
            'payment_status': self.payment_status.value,
        }

    @property
    def has_travel_details(self) -> bool:
        """Check if any of route, PNR or flying date was recovered."""
        return any(v is not None for v in (self.route, self.pnr, self.flying_date))


@dataclass(frozen=True)
class OpeningBalance:
    """Carried-forward balance declared in a file's preamble."""
    date: date
    amount: float

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.date.isoformat(), 'amount': self.amount}


@dataclass(frozen=True)
class IngestionResult:
    """
    Everything extracted from one uploaded file.

    Identity and timestamps are assigned by the persistence layer,
    not here.
    """
    filename: str
    layout: str
    opening_balance: Optional[OpeningBalance]
    records: Tuple[TravelRecord, ...]
    summary: IngestionSummary
    total_rows: int = 0
    skipped_rows: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the upload response shape."""
        return {
            'filename': self.filename,
            'layout': self.layout,
            'openingBalance': self.opening_balance.to_dict() if self.opening_balance else None,
            'entries': [r.to_dict() for r in self.records],
            'totalRecords': len(self.records),
            'parsedRows': len(self.records),
            'totalRows': self.total_rows,
            'skippedRows': self.skipped_rows,
            'summary': self.summary.to_dict(),
        }


@dataclass
class ValidationIssue:
    """
    Represents a validation issue found during parsing.
    """
    row_numbers: List[int]
    issue_type: str
    message: str
    severity: str = "warning"  # "warning" or "error"


class BaseParser(ABC):
    """
    Abstract base class for ledger parsers.
    """

    def __init__(self, filename: str):
        """
        Initialize the parser with the uploaded file's name.

        Args:
            filename: Original name of the uploaded file
        """
        self.filename = filename
        self._records: List[TravelRecord] = []
        self._validation_issues: List[ValidationIssue] = []

    @abstractmethod
    def parse(self) -> IngestionResult:
        """
        Parse the file and return the ingestion result.

        Returns:
            IngestionResult
        """
        pass

    def validate(self) -> List[ValidationIssue]:
        """
        Validate the parsed records and return any issues found.

        Returns:
            List of ValidationIssue objects
        """
        issues = []

        for i, record in enumerate(self._records):
            if record.debit is None and record.credit is None:
                issues.append(ValidationIssue(
                    row_numbers=[record.row_number],
                    issue_type="missing_amount",
                    message=f"Record {i+1} has no debit or credit amount",
                    severity="warning"
                ))

            if not record.has_travel_details:
                issues.append(ValidationIssue(
                    row_numbers=[record.row_number],
                    issue_type="missing_travel_details",
                    message=f"Record {i+1} has no route, PNR or flying date",
                    severity="warning"
                ))

        self._validation_issues = issues
        return issues

    @property
    def records(self) -> List[TravelRecord]:
        """Get the parsed records."""
        return self._records

    @property
    def validation_issues(self) -> List[ValidationIssue]:
        """Get validation issues."""
        return self._validation_issues


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class LedgerExtractionError(Exception):
    """Base class for errors that abort a whole upload."""
    pass


class MalformedInputError(LedgerExtractionError):
    """Raised when the buffer cannot be decoded as a spreadsheet."""
    pass


class NoDataAfterHeaderError(LedgerExtractionError):
    """Raised when nothing is left once the title rows are removed."""
    pass
