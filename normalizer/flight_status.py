"""
Flight status derivation from the flying date.
"""
from datetime import date, datetime
from enum import Enum
from typing import Optional, Union


class FlightStatus(str, Enum):
    """Temporal status of a booking."""
    COMING = "Coming"
    GONE = "Gone"
    CANCELLED = "Cancelled"  # only ever set by a reviewer, never derived


def derive_flight_status(
    flying_date: Optional[Union[date, datetime]],
    today: Union[date, datetime],
) -> FlightStatus:
    """
    Decide whether a flight is still upcoming.

    Both dates are compared at day granularity, so a flight on the same
    day as ``today`` is still COMING. Without a flying date the booking
    is assumed to be COMING. CANCELLED is never returned.

    Args:
        flying_date: Date of travel, if known
        today: Reference "now"

    Returns:
        FlightStatus.COMING or FlightStatus.GONE
    """
    if flying_date is None:
        return FlightStatus.COMING

    if isinstance(flying_date, datetime):
        flying_date = flying_date.date()
    if isinstance(today, datetime):
        today = today.date()

    if flying_date >= today:
        return FlightStatus.COMING
    return FlightStatus.GONE
