"""
API routes and endpoints.
"""

from . import bookings, cron, health, ical, units

__all__ = ["bookings", "cron", "health", "ical", "units"]
