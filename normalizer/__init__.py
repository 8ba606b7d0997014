"""
Normalizer module for parsing dates, amounts and flight status.
"""
from .date_parser import parse_date, is_valid_date, parse_dmy, to_iso
from .amount_parser import parse_amount, has_valid_amount
from .flight_status import FlightStatus, derive_flight_status

__all__ = [
    'parse_date', 'is_valid_date', 'parse_dmy', 'to_iso',
    'parse_amount', 'has_valid_amount',
    'FlightStatus', 'derive_flight_status',
]
