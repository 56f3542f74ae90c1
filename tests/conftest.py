"""
Shared fixtures and in-memory collaborators for the test suite.
"""
import asyncio
from datetime import date
from typing import Dict, List, Optional

import pytest

from staysync.firebase_sync.firestore_client import synced_booking_id
from staysync.utils.errors import FeedFetchError
from staysync.utils.models import (
    BookingData, NotificationResult, Platform, SourceFetchResult, SyncedEvent, SyncResult, Unit
)


class InMemoryStore:
    """Booking store with the FirestoreClient interface, kept in dicts."""

    def __init__(self, units: Optional[List[Unit]] = None):
        self.units: Dict[str, Unit] = {u.id: u for u in units or []}
        self.bookings: Dict[str, BookingData] = {}
        self.uid_lookups: List[tuple] = []
        self.initialized = True
        self._next_id = 1

    def initialize(self) -> bool:
        return True

    async def get_unit(self, unit_id: str) -> Optional[Unit]:
        return self.units.get(unit_id)

    async def list_units(self) -> List[Unit]:
        return list(self.units.values())

    async def get_bookings_for_unit(self, unit_id: str) -> List[BookingData]:
        return [b for b in self.bookings.values() if b.unit_id == unit_id]

    async def find_existing_uids(self, uids, unit_id=None):
        uids = set(uids)
        self.uid_lookups.append((frozenset(uids), unit_id))
        return {
            b.uid for b in self.bookings.values()
            if b.uid in uids and (unit_id is None or b.unit_id == unit_id)
        }

    async def add_booking(self, booking: BookingData) -> BookingData:
        booking.id = f"booking-{self._next_id}"
        self._next_id += 1
        self.bookings[booking.id] = booking
        return booking

    async def create_synced_booking(self, booking: BookingData, dry_run: bool = False) -> SyncResult:
        doc_id = synced_booking_id(booking.uid)
        if doc_id in self.bookings:
            return SyncResult(success=True, is_new=False, booking_data=booking, uid=booking.uid)
        booking.id = doc_id
        if not dry_run:
            self.bookings[doc_id] = booking
        return SyncResult(success=True, is_new=True, booking_data=booking, uid=booking.uid)

    def seed(self, booking: BookingData) -> BookingData:
        booking.id = booking.id or (synced_booking_id(booking.uid) if booking.uid
                                    else f"seed-{len(self.bookings) + 1}")
        self.bookings[booking.id] = booking
        return booking


class StaticFetcher:
    """Fetcher returning canned events per feed URL; an exception value is raised."""

    def __init__(self, feeds: Dict[str, object], delay: float = 0):
        self.feeds = feeds
        self.delay = delay
        self.requested: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def load_events(self, url: str, require_summary: bool = True) -> List[SyncedEvent]:
        self.requested.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            outcome = self.feeds.get(url, [])
        finally:
            self.in_flight -= 1
        if isinstance(outcome, Exception):
            raise outcome
        return [e for e in outcome if e.summary or not require_summary]

    async def fetch_source(self, platform: Platform, url: str,
                           require_summary: bool = True) -> SourceFetchResult:
        try:
            events = await self.load_events(url, require_summary)
        except FeedFetchError as e:
            return SourceFetchResult(platform=platform, url=url, error_message=str(e))
        return SourceFetchResult(platform=platform, url=url,
                                 events=[e.with_platform(platform) for e in events])


class RecordingNotifier:
    """Notifier that records what it was asked to announce."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.new_bookings: List[BookingData] = []
        self.synced: List[tuple] = []

    def _result(self) -> NotificationResult:
        if self.succeed:
            return NotificationResult(success=True, message="sent")
        return NotificationResult(success=False, message="webhook down")

    async def notify_new_booking(self, booking, unit):
        self.new_bookings.append(booking)
        return self._result()

    async def notify_synced_booking(self, booking, unit, platform):
        self.synced.append((booking, platform))
        return self._result()


def make_event(uid: str, start: date, end: date, summary: str = "Reserved") -> SyncedEvent:
    return SyncedEvent(uid=uid, summary=summary, start=start, end=end)


@pytest.fixture
def sample_unit():
    """Unit with all three feeds configured."""
    return Unit(
        id="unit-1",
        name="Sea View Villa",
        rate=100.0,
        base_occupancy=2,
        max_occupancy=4,
        extra_guest_fee=25.0,
        calendars={
            Platform.AIRBNB: "https://airbnb.example/unit-1.ics",
            Platform.BOOKINGCOM: "https://booking.example/unit-1.ics",
            Platform.DIRECT: "webcal://direct.example/unit-1.ics",
        },
    )


@pytest.fixture
def store(sample_unit):
    return InMemoryStore([sample_unit])


@pytest.fixture
def notifier():
    return RecordingNotifier()
