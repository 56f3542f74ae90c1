"""
Exception types shared across the sync engine and the API layer.
"""


class StaysyncError(Exception):
    """Base error for the booking and calendar sync system."""


class UnitNotFoundError(StaysyncError):
    """Raised when a unit id does not resolve to a stored unit."""

    def __init__(self, unit_id: str):
        self.unit_id = unit_id
        super().__init__(f"Unit not found: {unit_id}")


class InvalidBookingError(StaysyncError):
    """Raised when a booking request fails validation against its unit."""


class FeedFetchError(StaysyncError):
    """Raised when an external calendar feed cannot be retrieved or parsed."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Calendar feed {url} failed: {message}")


class PersistenceError(StaysyncError):
    """Raised when a write to the booking store is rejected."""
