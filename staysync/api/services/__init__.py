"""
Business logic services behind the API routes.
"""

from .booking_service import BookingService, quote_stay
from .unit_service import UnitService

__all__ = ["BookingService", "UnitService", "quote_stay"]
