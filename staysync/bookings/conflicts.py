"""
Stay interval overlap checks for direct bookings.

Stays are half-open intervals ``[check_in, check_out)``: a guest checking out
on the day the next guest checks in does not conflict.
"""
from datetime import datetime
from typing import Iterable, Optional

from ..utils.models import BookingData


def intervals_overlap(a_start: datetime, a_end: datetime,
                      b_start: datetime, b_end: datetime) -> bool:
    """Return True when ``[a_start, a_end)`` and ``[b_start, b_end)`` intersect."""
    return a_start < b_end and b_start < a_end


def find_conflict(candidate: BookingData,
                  existing: Iterable[BookingData]) -> Optional[BookingData]:
    """
    Find the first stored booking that overlaps a candidate stay.

    Only bookings of the candidate's unit are considered, and the first match
    in iteration order is returned; the caller gets one conflict to resolve,
    not the full list.

    Args:
        candidate: Booking about to be created (check_in < check_out)
        existing: Bookings already stored, typically for the same unit

    Returns:
        The first conflicting booking, or None
    """
    for booking in existing:
        if booking.unit_id != candidate.unit_id:
            continue
        if booking.id is not None and booking.id == candidate.id:
            continue
        if intervals_overlap(candidate.check_in_date, candidate.check_out_date,
                             booking.check_in_date, booking.check_out_date):
            return booking
    return None
