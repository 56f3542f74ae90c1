from datetime import datetime, timezone
from typing import Dict, Any, List
from urllib.parse import urlparse

from icalendar import Calendar, Event

from ...firebase_sync.firestore_client import FirestoreClient
from ...utils.errors import UnitNotFoundError
from ...utils.models import BookingData, Unit
from config.settings import api_config


class UnitService:
    """Service for unit lookups and the unit's outbound iCal feed."""

    def __init__(self, store: FirestoreClient, logger):
        self.store = store
        self.logger = logger

    async def get_unit(self, unit_id: str) -> Unit:
        unit = await self.store.get_unit(unit_id)
        if unit is None:
            raise UnitNotFoundError(unit_id)
        return unit

    async def generate_ical_feed(self, unit_id: str) -> str:
        """
        Generate iCal content listing the unit's bookings.

        Stays are exported as all-day events; DTEND is the exclusive check-out day.
        """
        unit = await self.get_unit(unit_id)
        bookings = await self.store.get_bookings_for_unit(unit.id)
        return self.render_ical(unit, bookings)

    def render_ical(self, unit: Unit, bookings: List[BookingData]) -> str:
        now = datetime.now(timezone.utc)

        # Derive a meaningful UID domain from configured base URL
        parsed = urlparse(api_config.base_url or "")
        uid_domain = (parsed.hostname or "example.com").strip()

        cal = Calendar()
        cal.add("prodid", f"-//{uid_domain}//Staysync Booking Calendar//EN")
        cal.add("version", "2.0")
        cal.add("calscale", "GREGORIAN")
        cal.add("method", "PUBLISH")
        cal.add("x-wr-calname", unit.name)

        for booking in sorted(bookings, key=lambda b: b.check_in_date):
            if not booking.has_valid_interval():
                self.logger.warning("Skipping booking with invalid stay", booking_id=booking.id)
                continue

            # Keep the original feed uid so re-importing our own feed deduplicates
            guest_name = booking.guest_name or "Guest"
            event = Event()
            event.add("uid", booking.uid or f"{booking.id}@{uid_domain}")
            event.add("dtstamp", booking.created_at or now)
            event.add("dtstart", booking.check_in_date.date())
            event.add("dtend", booking.check_out_date.date())
            event.add("summary", f"Reserved - {guest_name}")
            event.add("description", f"Booking for {guest_name}")
            cal.add_component(event)

        # to_ical folds long lines and uses CRLF endings
        return cal.to_ical().decode("utf-8")

    def feed_headers(self, unit_id: str) -> Dict[str, Any]:
        return {"Content-Disposition": f'attachment; filename="unit-{unit_id}.ics"'}
