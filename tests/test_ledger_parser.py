"""
Integration tests for the ledger extraction pipeline.
"""
import unittest
from datetime import date, timedelta

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from ledger_fixtures import (
    RAW_LEDGER_ROWS, RAW_TODAY, STANDARD_SHEET_ROWS, STANDARD_TODAY,
    build_csv, build_xlsx,
)
from aggregator.summary import IngestionSummary, summarize_records
from normalizer.flight_status import FlightStatus
from parsers.base_parser import (
    MalformedInputError, NoDataAfterHeaderError, PaymentStatus, TravelRecord
)
from parsers.layout_profiles import RAW_LEDGER_PROFILE, STANDARD_SHEET_PROFILE
from parsers.ledger_parser import LedgerParser, process_ledger_file
from parsers.row_normalizer import (
    SKIP_HEADER_ECHO, SKIP_INVALID_DATE, SKIP_MISSING_DATE, SKIP_MISSING_VOUCHER,
    SKIP_TOO_FEW_CELLS, SKIP_TOTAL_ROW, RowNormalizer,
)


class TestRawLedgerIngestion(unittest.TestCase):
    """End-to-end tests on a raw ledger workbook."""

    def setUp(self):
        self.parser = LedgerParser(
            build_xlsx(RAW_LEDGER_ROWS), "march_ledger.xlsx", today=RAW_TODAY
        )
        self.result = self.parser.parse()

    def test_layout_and_opening_balance(self):
        """Test layout detection and the preamble balance."""
        self.assertEqual(self.result.layout, "raw_ledger")
        self.assertEqual(self.result.opening_balance.date, date(2024, 1, 1))
        self.assertEqual(self.result.opening_balance.amount, 12500.0)

    def test_records_kept(self):
        """Test which rows became records."""
        self.assertEqual([r.voucher for r in self.result.records], ["SV-001", "PV-002", "RV-003"])
        self.assertEqual([r.row_number for r in self.result.records], [6, 7, 9])

    def test_sales_text_in_amount_column(self):
        """Test a SALES description in the 5th column."""
        record = self.result.records[0]

        self.assertEqual(record.date, date(2024, 1, 5))
        self.assertIsNone(record.debit)
        self.assertEqual(record.balance, 12500.0)
        self.assertEqual(record.customer_name, "JOHN DOE")
        self.assertEqual(record.route, "DXB/LHE")
        self.assertEqual(record.pnr, "94A63T")
        self.assertEqual(record.flying_date, date(2024, 12, 6))
        self.assertEqual(record.flight_status, FlightStatus.COMING)

    def test_debit_row_uses_narration(self):
        """Test travel details recovered from the narration column."""
        record = self.result.records[1]

        self.assertEqual(record.debit, 3000.0)
        self.assertIsNone(record.credit)
        self.assertEqual(record.route, "LHE-JED")
        self.assertEqual(record.pnr, "AB12CD")
        self.assertEqual(record.flying_date, date(2024, 2, 10))
        self.assertEqual(record.flight_status, FlightStatus.GONE)

    def test_record_without_travel_details(self):
        """Test a receipt row with nothing to extract."""
        record = self.result.records[2]

        self.assertEqual(record.credit, 9500.0)
        self.assertEqual(record.balance, 0.0)
        self.assertFalse(record.has_travel_details)
        self.assertEqual(record.flight_status, FlightStatus.COMING)

    def test_skip_reasons(self):
        """Test that header echoes, bad dates and totals are skipped."""
        self.assertEqual(
            self.parser.skip_reasons,
            {SKIP_HEADER_ECHO: 1, SKIP_INVALID_DATE: 1, SKIP_TOTAL_ROW: 1},
        )
        self.assertEqual(self.result.skipped_rows, 3)
        self.assertEqual(self.result.total_rows, 6)

    def test_summary(self):
        """Test the summary block."""
        summary = self.result.summary

        self.assertEqual(summary.total_bookings, 3)
        self.assertEqual(summary.total_revenue, 3000.0)
        self.assertEqual(summary.total_expenses, 9500.0)
        self.assertEqual(summary.coming_flights, 2)

    def test_reviewer_fields_defaulted(self):
        """Test the fields left for manual review."""
        for record in self.result.records:
            self.assertEqual(record.customer_rate, 0)
            self.assertEqual(record.company_rate, 0)
            self.assertEqual(record.profit, 0)
            self.assertEqual(record.payment_status, PaymentStatus.PENDING)

    def test_mandatory_fields_and_status(self):
        """Test that every record has a date and voucher and is never Cancelled."""
        for record in self.result.records:
            self.assertIsInstance(record.date, date)
            self.assertTrue(record.voucher)
            self.assertIn(record.flight_status, (FlightStatus.COMING, FlightStatus.GONE))

    def test_validate(self):
        """Test post-parse validation warnings."""
        issues = self.parser.validate()
        types = sorted(issue.issue_type for issue in issues)

        self.assertEqual(types, ["missing_amount", "missing_travel_details"])
        self.assertEqual(self.parser.validation_issues, issues)

    def test_csv_gives_same_records(self):
        """Test that the CSV export of the same ledger parses the same way."""
        csv_result = process_ledger_file(
            build_csv(RAW_LEDGER_ROWS), "march_ledger.csv", today=RAW_TODAY
        )
        self.assertEqual(csv_result.to_dict()['entries'], self.result.to_dict()['entries'])


class TestStandardSheetIngestion(unittest.TestCase):
    """End-to-end tests on a standard travel sheet."""

    def setUp(self):
        self.parser = LedgerParser(
            build_csv(STANDARD_SHEET_ROWS), "bookings.csv", today=STANDARD_TODAY
        )
        self.result = self.parser.parse()

    def test_layout_and_opening_balance(self):
        """Test layout detection and the ISO-dated balance."""
        self.assertEqual(self.result.layout, "standard_sheet")
        self.assertEqual(self.result.opening_balance.date, date(2025, 1, 1))
        self.assertEqual(self.result.opening_balance.amount, 5000.0)

    def test_composite_column(self):
        """Test travel details taken from the composite column."""
        first, second = self.result.records

        self.assertEqual(first.customer_name, "Ali Khan")
        self.assertEqual(first.route, "DXB-LHE")
        self.assertEqual(first.pnr, "PNR54321")
        self.assertEqual(first.flying_date, date(2025, 8, 1))
        self.assertEqual(first.debit, 1500.0)
        self.assertEqual(first.flight_status, FlightStatus.COMING)

        self.assertEqual(second.customer_name, "Sara Ahmed")
        self.assertEqual(second.pnr, "AB123")
        self.assertIsNone(second.debit)
        self.assertEqual(second.credit, 200.0)
        self.assertEqual(second.flight_status, FlightStatus.GONE)

    def test_empty_voucher_dropped(self):
        """Test that a row without a voucher is not a record."""
        self.assertNotIn("", [r.voucher for r in self.result.records])
        self.assertEqual(self.result.summary.total_bookings, 2)
        self.assertEqual(
            self.parser.skip_reasons, {SKIP_MISSING_VOUCHER: 1, SKIP_TOTAL_ROW: 1}
        )

    def test_total_revenue_is_sum_of_debits(self):
        """Test that revenue sums the debits of kept records only."""
        expected = sum(r.debit for r in self.result.records if r.debit is not None)
        self.assertEqual(self.result.summary.total_revenue, expected)
        self.assertEqual(self.result.summary.total_revenue, 1500.0)
        self.assertEqual(self.result.summary.total_expenses, 200.0)

    def test_response_shape(self):
        """Test the serialized result."""
        payload = self.result.to_dict()

        self.assertEqual(payload['filename'], "bookings.csv")
        self.assertEqual(payload['openingBalance'], {'date': "2025-01-01", 'amount': 5000.0})
        self.assertEqual(payload['totalRecords'], 2)
        self.assertEqual(payload['parsedRows'], 2)
        self.assertEqual(payload['totalRows'], 4)
        self.assertEqual(payload['skippedRows'], 2)
        self.assertEqual(payload['summary'], {
            'totalBookings': 2,
            'totalRevenue': 1500.0,
            'totalExpenses': 200.0,
            'comingFlights': 1,
        })

        entry = payload['entries'][0]
        self.assertEqual(entry['date'], "2025-01-10")
        self.assertEqual(entry['flying_date'], "2025-08-01")
        self.assertEqual(entry['flight_status'], "Coming")
        self.assertEqual(entry['payment_status'], "Pending")

    def test_idempotent(self):
        """Test that the same input and reference date give the same result."""
        again = process_ledger_file(
            build_csv(STANDARD_SHEET_ROWS), "bookings.csv", today=STANDARD_TODAY
        )
        self.assertEqual(again.to_dict(), self.result.to_dict())


class TestFlightStatusBoundary(unittest.TestCase):
    """Tests for flight status relative to the injected reference date."""

    def _status_for(self, flying_date, today):
        rows = STANDARD_SHEET_ROWS[:4] + [[
            "2025-01-10", "V001", "REF1", "Ticket", "1500.00", "", "",
            f"Ali Khan DXB-LHE PNR54321 {flying_date.isoformat()}",
        ]]
        result = process_ledger_file(build_csv(rows), "bookings.csv", today=today)
        return result.records[0].flight_status

    def test_day_before_is_gone(self):
        """Test a flight one day before the reference date."""
        today = date(2025, 8, 1)
        self.assertEqual(self._status_for(today - timedelta(days=1), today), FlightStatus.GONE)

    def test_same_day_is_coming(self):
        """Test a flight on the reference date."""
        today = date(2025, 8, 1)
        self.assertEqual(self._status_for(today, today), FlightStatus.COMING)


class TestRowNormalizer(unittest.TestCase):
    """Tests for row-level filtering."""

    def setUp(self):
        self.raw = RowNormalizer(RAW_LEDGER_PROFILE, RAW_TODAY)
        self.standard = RowNormalizer(STANDARD_SHEET_PROFILE, RAW_TODAY)

    def test_too_few_cells(self):
        """Test rows with fewer than four populated cells."""
        record, reason = self.standard.normalize(["2025-01-10", "V001", "x", None], 5)
        self.assertIsNone(record)
        self.assertEqual(reason, SKIP_TOO_FEW_CELLS)

    def test_missing_date(self):
        """Test a row without a date."""
        record, reason = self.standard.normalize([None, "V001", "R", "N", "100"], 5)
        self.assertEqual(reason, SKIP_MISSING_DATE)

    def test_total_row_any_case(self):
        """Test that "TOTAL" anywhere in the row skips it."""
        _, reason = self.standard.normalize(["2025-01-10", "V1", "R", "SUB-TOTAL", "100"], 5)
        self.assertEqual(reason, SKIP_TOTAL_ROW)

    def test_bare_number_date_dropped(self):
        """Test that a date cell holding only a day number drops the row."""
        record, reason = self.standard.normalize(["5", "V1", "R", "narr", "100", "", "100"], 5)

        self.assertIsNone(record)
        self.assertEqual(reason, SKIP_INVALID_DATE)

    def test_bare_number_date_not_ingested(self):
        """Test that such a row never reaches the records or the summary."""
        title = ["Title", None, None, None, None, None, None]
        grid = [title, title, title, ["5", "V1", "R", "narr", "100", "", "100"]]
        parser = LedgerParser(b"", "bookings.csv", today=STANDARD_TODAY)
        result = parser.parse_grid(grid)

        self.assertEqual(result.records, ())
        self.assertEqual(result.summary.total_bookings, 0)
        self.assertEqual(parser.skip_reasons, {SKIP_INVALID_DATE: 1})

    def test_sales_text_ignored_for_standard_sheet(self):
        """Test that only raw ledgers read SALES text from the amount column."""
        row = ["2025-01-10", "V1", "R", "Ticket DXB-LHE",
               "SALES - MR JOHN DOE - DXB/LHE - 94A63T - 06/12/2024"]
        record, _ = self.standard.normalize(row, 5)

        self.assertIsNone(record.debit)
        self.assertIsNone(record.customer_name)
        self.assertEqual(record.route, "DXB-LHE")

    def test_native_date_cell(self):
        """Test a workbook date in the date column."""
        record, reason = self.raw.normalize([date(2024, 1, 5), "V1", None, "Booking", 250.0], 6)

        self.assertIsNone(reason)
        self.assertEqual(record.date, date(2024, 1, 5))
        self.assertEqual(record.debit, 250.0)
        self.assertIsNone(record.reference)

    def test_numeric_voucher(self):
        """Test that a numeric voucher cell keeps its typed form."""
        record, _ = self.raw.normalize(["05/01/2024", 1001.0, "R", "Booking", "10"], 6)
        self.assertEqual(record.voucher, "1001")


class TestEmptyInput(unittest.TestCase):
    """Tests for inputs with nothing to extract."""

    def test_empty_file(self):
        """Test that an empty upload is an error."""
        with self.assertRaises(NoDataAfterHeaderError):
            process_ledger_file(b"", "bookings.csv", today=STANDARD_TODAY)

    def test_only_title_rows(self):
        """Test a file holding nothing but the title block."""
        with self.assertRaises(NoDataAfterHeaderError):
            process_ledger_file(
                build_csv(STANDARD_SHEET_ROWS[:3]), "bookings.csv", today=STANDARD_TODAY
            )

    def test_no_records_is_not_an_error(self):
        """Test a file whose data rows are all skipped."""
        rows = STANDARD_SHEET_ROWS[:3] + [["Total", "", "", "Grand total", "0", "0", "0", ""]]
        result = process_ledger_file(build_csv(rows), "bookings.csv", today=STANDARD_TODAY)

        self.assertEqual(result.records, ())
        self.assertIsNone(result.opening_balance)
        self.assertEqual(result.summary, IngestionSummary())

    def test_malformed_workbook(self):
        """Test that an unreadable workbook aborts the upload."""
        with self.assertRaises(MalformedInputError):
            process_ledger_file(b"not a workbook", "bookings.xlsx", today=STANDARD_TODAY)


class TestSummaryAggregator(unittest.TestCase):
    """Tests for summary folding."""

    def test_null_amounts_left_out(self):
        """Test that missing debits and credits do not count as zero."""
        records = [
            TravelRecord(date=date(2025, 1, 1), voucher="A", debit=100.0),
            TravelRecord(date=date(2025, 1, 2), voucher="B", credit=40.0,
                         flight_status=FlightStatus.GONE),
            TravelRecord(date=date(2025, 1, 3), voucher="C"),
        ]
        summary = summarize_records(records)

        self.assertEqual(summary.total_bookings, 3)
        self.assertEqual(summary.total_revenue, 100.0)
        self.assertEqual(summary.total_expenses, 40.0)
        self.assertEqual(summary.coming_flights, 2)

    def test_empty(self):
        """Test the all-zero summary."""
        self.assertEqual(summarize_records([]).to_dict(), {
            'totalBookings': 0,
            'totalRevenue': 0.0,
            'totalExpenses': 0.0,
            'comingFlights': 0,
        })


if __name__ == '__main__':
    unittest.main()
