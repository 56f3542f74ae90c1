"""
Staysync: rental unit bookings, overlap checks and external calendar sync.

Direct bookings are checked against a unit's stored stays before they are
written, and Airbnb / Booking.com / direct iCal feeds are reconciled into
Firebase Firestore without importing the same event twice.
"""

__version__ = "1.0.0"
__description__ = "Booking conflict checks and iCal reconciliation for rental units"
