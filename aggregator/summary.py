"""
Summary aggregation over normalized travel records.

Folds the records of one upload into:
1. Booking count
2. Revenue (sum of debits)
3. Expenses (sum of credits)
4. Upcoming flight count
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Iterable

from normalizer.flight_status import FlightStatus

if TYPE_CHECKING:
    from parsers.base_parser import TravelRecord


@dataclass(frozen=True)
class IngestionSummary:
    """Totals over the records of one upload."""
    total_bookings: int = 0
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    coming_flights: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalBookings': self.total_bookings,
            'totalRevenue': self.total_revenue,
            'totalExpenses': self.total_expenses,
            'comingFlights': self.coming_flights,
        }


class SummaryAggregator:
    """
    Builds the summary block of an ingestion result.

    Null amounts are left out of the sums rather than counted as zero,
    and an empty record list gives an all-zero summary.
    """

    def summarize(self, records: Iterable["TravelRecord"]) -> IngestionSummary:
        """
        Fold records into totals.

        Args:
            records: Records that survived row filtering

        Returns:
            IngestionSummary
        """
        total_bookings = 0
        total_revenue = 0.0
        total_expenses = 0.0
        coming_flights = 0

        for record in records:
            total_bookings += 1
            if record.debit is not None:
                total_revenue += record.debit
            if record.credit is not None:
                total_expenses += record.credit
            if record.flight_status == FlightStatus.COMING:
                coming_flights += 1

        return IngestionSummary(
            total_bookings=total_bookings,
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            coming_flights=coming_flights,
        )


def summarize_records(records: Iterable["TravelRecord"]) -> IngestionSummary:
    """Summarize records with a default aggregator."""
    return SummaryAggregator().summarize(records)
