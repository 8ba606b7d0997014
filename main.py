#!/usr/bin/env python3
"""
Travel Ledger Extractor - Main Entry Point

Reads a ledger export (XLSX, XLS or CSV), extracts travel booking
records and writes them, with the opening balance and summary, as JSON.

Usage:
    python main.py --input <filepath> [--output <result.json>] [options]

Examples:
    python main.py --input raw_ledger_march.xlsx --output bookings.json
    python main.py --input travel_sheet.csv --today 2025-01-31 --verbose
"""
import argparse
import json
import logging
import os
import sys
from datetime import date, datetime
from typing import Optional

from config import APP_NAME, get_chunk_size, get_log_level
from parsers.base_parser import LedgerExtractionError
from parsers.ledger_parser import LedgerParser
from parsers.upload_validator import UploadRejectedError, validate_upload


def parse_arguments(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Extract travel booking records from a ledger export.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --input raw_ledger_march.xlsx --output bookings.json
  python main.py --input travel_sheet.csv --today 2025-01-31

Environment Variables:
  READ_CHUNK_SIZE  - Rows read per window (default: 1000)
  MAX_FILE_SIZE    - Upload size ceiling in bytes (default: 10 MB)
  LOG_LEVEL        - Logging level (default: INFO)
        """
    )

    parser.add_argument(
        '--input', '-i',
        required=True,
        help='Path to the ledger file (CSV, XLS or XLSX)'
    )
    parser.add_argument(
        '--output', '-o',
        default=None,
        help='Path for the JSON result (printed to stdout if omitted)'
    )
    parser.add_argument(
        '--today',
        type=_iso_date,
        default=None,
        help='Reference date YYYY-MM-DD for flight status (default: current date)'
    )
    parser.add_argument(
        '--chunk-size',
        type=int,
        default=None,
        help=f'Rows read per window (default: {get_chunk_size()})'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    return parser.parse_args(argv)


def _iso_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}'. Use YYYY-MM-DD.")


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else get_log_level(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    if not os.path.exists(args.input):
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        return 1

    filename = os.path.basename(args.input)

    try:
        validate_upload(filename, os.path.getsize(args.input))
    except UploadRejectedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    with open(args.input, 'rb') as f:
        buffer = f.read()

    print(f"\n{'='*60}", file=sys.stderr)
    print(APP_NAME, file=sys.stderr)
    print(f"{'='*60}", file=sys.stderr)
    print(f"Input file: {args.input}", file=sys.stderr)
    print(f"Output file: {args.output or '<stdout>'}", file=sys.stderr)
    print(f"{'='*60}\n", file=sys.stderr)

    parser = LedgerParser(
        buffer,
        filename,
        today=args.today,
        chunk_size=args.chunk_size,
    )

    try:
        result = parser.parse()
    except LedgerExtractionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Validation warnings
    issues = parser.validate()
    if issues:
        print(f"\nValidation warnings ({len(issues)}):", file=sys.stderr)
        for issue in issues[:10]:
            print(f"  - Row {issue.row_numbers}: {issue.message}", file=sys.stderr)
        if len(issues) > 10:
            print(f"  ... and {len(issues) - 10} more", file=sys.stderr)

    # Parsing summary
    summary = result.summary
    print("\n--- Extraction Summary ---", file=sys.stderr)
    print(f"Layout: {parser.profile.name}", file=sys.stderr)
    if result.opening_balance:
        print(
            f"Opening balance: {result.opening_balance.amount:,.2f} "
            f"on {result.opening_balance.date.isoformat()}",
            file=sys.stderr,
        )
    print(f"Total bookings: {summary.total_bookings}", file=sys.stderr)
    print(f"Total revenue: {summary.total_revenue:,.2f}", file=sys.stderr)
    print(f"Total expenses: {summary.total_expenses:,.2f}", file=sys.stderr)
    print(f"Coming flights: {summary.coming_flights}", file=sys.stderr)
    print(f"Rows skipped: {result.skipped_rows}", file=sys.stderr)
    for reason, count in sorted(parser.skip_reasons.items()):
        print(f"  {reason}: {count}", file=sys.stderr)

    payload = json.dumps(result.to_dict(), indent=2)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(payload)
        print(f"\nOutput saved to: {args.output}", file=sys.stderr)
    else:
        print(payload)

    return 0


if __name__ == "__main__":
    sys.exit(main())
