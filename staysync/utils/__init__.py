"""
Utility modules for the Staysync booking and calendar sync system.
"""

from .models import (
    Platform, PaymentStatus, UnitStatus, Unit, BookingData, SyncedEvent,
    ImportPolicy, SyncResult, NotificationResult, SourceFetchResult,
    ReconciliationResult, to_utc_datetime
)
from .logger import setup_logger, get_logger, SyncLogger

__all__ = [
    'Platform', 'PaymentStatus', 'UnitStatus', 'Unit', 'BookingData', 'SyncedEvent',
    'ImportPolicy', 'SyncResult', 'NotificationResult', 'SourceFetchResult',
    'ReconciliationResult', 'to_utc_datetime', 'setup_logger', 'get_logger', 'SyncLogger'
]
