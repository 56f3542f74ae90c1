"""
Tests for calendar reconciliation.
"""
import asyncio
from datetime import date

import pytest

from conftest import InMemoryStore, RecordingNotifier, StaticFetcher, make_event
from staysync.calendar_sync.reconciler import CalendarReconciler, SWEEP_POLICY, UNIT_SYNC_POLICY
from staysync.utils.errors import FeedFetchError, UnitNotFoundError
from staysync.utils.models import BookingData, PaymentStatus, Platform, SyncResult, Unit

AIRBNB = "https://airbnb.example/unit-1.ics"
BOOKINGCOM = "https://booking.example/unit-1.ics"
DIRECT = "webcal://direct.example/unit-1.ics"


def reconciler_for(store, feeds, notifier=None):
    return CalendarReconciler(store, StaticFetcher(feeds), notifier or RecordingNotifier())


@pytest.mark.unit
class TestSyncUnit:
    """Per-unit reconciliation."""

    def test_only_unknown_uids_are_imported(self, store, notifier):
        existing = store.seed(BookingData(unit_id="unit-1", uid="E2", check_in_date=date(2024, 3, 5),
                                          check_out_date=date(2024, 3, 7), guest_first_name="Kept"))
        feeds = {AIRBNB: [
            make_event("E1", date(2024, 3, 1), date(2024, 3, 3)),
            make_event("E2", date(2024, 3, 5), date(2024, 3, 7)),
            make_event("E3", date(2024, 3, 9), date(2024, 3, 12)),
        ]}

        result = asyncio.run(reconciler_for(store, feeds, notifier).sync_unit("unit-1"))

        assert result.new_bookings == 2
        assert {b.uid for b in result.created_bookings} == {"E1", "E3"}
        assert result.duplicate_events == 1
        assert [b.uid for b in store.bookings.values()].count("E2") == 1
        assert store.bookings[existing.id].guest_first_name == "Kept"
        assert len(notifier.synced) == 2

    def test_second_run_creates_nothing(self, store):
        feeds = {AIRBNB: [make_event("E1", date(2024, 3, 1), date(2024, 3, 3)),
                          make_event("E2", date(2024, 3, 5), date(2024, 3, 7))]}
        reconciler = reconciler_for(store, feeds)

        first = asyncio.run(reconciler.sync_unit("unit-1"))
        second = asyncio.run(reconciler.sync_unit("unit-1"))

        assert first.new_bookings == 2
        assert second.new_bookings == 0
        assert second.duplicate_events == 2
        assert len(store.bookings) == 2

    def test_failing_source_does_not_block_others(self, store, notifier):
        feeds = {
            AIRBNB: FeedFetchError(AIRBNB, "timed out after 15s"),
            BOOKINGCOM: [make_event("B1", date(2024, 4, 1), date(2024, 4, 4))],
            DIRECT: [make_event("D1", date(2024, 4, 10), date(2024, 4, 12)),
                     make_event("D2", date(2024, 4, 20), date(2024, 4, 22))],
        }

        result = asyncio.run(reconciler_for(store, feeds, notifier).sync_unit("unit-1"))

        assert result.failed_sources == ["unit-1:Airbnb"]
        assert {b.uid for b in result.created_bookings} == {"B1", "D1", "D2"}
        assert result.notifications_sent == 3
        assert [platform for _, platform in notifier.synced] == ["Booking.com", "Direct", "Direct"]

    def test_sources_are_fetched_concurrently(self, store):
        fetcher = StaticFetcher({
            AIRBNB: [make_event("A1", date(2024, 4, 1), date(2024, 4, 3))],
            BOOKINGCOM: [make_event("B1", date(2024, 4, 5), date(2024, 4, 7))],
            DIRECT: [make_event("D1", date(2024, 4, 9), date(2024, 4, 11))],
        }, delay=0.05)
        reconciler = CalendarReconciler(store, fetcher, RecordingNotifier())

        result = asyncio.run(reconciler.sync_unit("unit-1"))

        assert fetcher.max_in_flight == 3
        assert [e.uid for e in result.events] == ["A1", "B1", "D1"]

    def test_unexpected_fetcher_error_counts_as_failed_source(self, store):
        feeds = {
            AIRBNB: RuntimeError("parser crashed"),
            BOOKINGCOM: [make_event("B1", date(2024, 4, 1), date(2024, 4, 4))],
        }

        result = asyncio.run(reconciler_for(store, feeds).sync_unit("unit-1"))

        assert result.failed_sources == ["unit-1:Airbnb"]
        assert [b.uid for b in result.created_bookings] == ["B1"]

    def test_notification_failure_keeps_booking(self, store):
        notifier = RecordingNotifier(succeed=False)
        feeds = {AIRBNB: [make_event("E1", date(2024, 3, 1), date(2024, 3, 3))]}

        result = asyncio.run(reconciler_for(store, feeds, notifier).sync_unit("unit-1"))

        assert result.new_bookings == 1
        assert result.notifications_failed == 1
        assert result.notifications_sent == 0
        assert len(store.bookings) == 1

    def test_same_uid_in_two_feeds_imported_once(self, store):
        feeds = {
            AIRBNB: [make_event("X1", date(2024, 5, 1), date(2024, 5, 3))],
            BOOKINGCOM: [make_event("X1", date(2024, 5, 1), date(2024, 5, 3))],
        }

        result = asyncio.run(reconciler_for(store, feeds).sync_unit("unit-1"))

        assert result.new_bookings == 1
        assert result.duplicate_events == 1
        assert result.created_bookings[0].guest_last_name == "Airbnb"

    def test_unit_sync_import_defaults(self, store, sample_unit):
        feeds = {AIRBNB: [make_event("E1", date(2024, 3, 1), date(2024, 3, 3), summary="Reserved")]}

        result = asyncio.run(reconciler_for(store, feeds).sync_unit("unit-1"))

        booking = result.created_bookings[0]
        assert booking.payment_status == UNIT_SYNC_POLICY.payment_status == PaymentStatus.PAID
        assert booking.adults == 0
        assert booking.guest_first_name == "Synced"
        assert booking.guest_last_name == "Airbnb"
        assert booking.special_requests == "Synced from Airbnb: Reserved"
        assert booking.nightly_rate == sample_unit.rate

    def test_import_error_is_recorded_and_run_continues(self, store):
        original = store.create_synced_booking

        async def flaky(booking, dry_run=False):
            if booking.uid == "E1":
                return SyncResult(success=False, error_message="quota exceeded", uid="E1")
            return await original(booking, dry_run)

        store.create_synced_booking = flaky
        feeds = {AIRBNB: [make_event("E1", date(2024, 3, 1), date(2024, 3, 3)),
                          make_event("E2", date(2024, 3, 5), date(2024, 3, 7))]}

        result = asyncio.run(reconciler_for(store, feeds).sync_unit("unit-1"))

        assert result.import_errors == ["E1: quota exceeded"]
        assert [b.uid for b in result.created_bookings] == ["E2"]

    def test_dry_run_writes_and_notifies_nothing(self, store, notifier):
        feeds = {AIRBNB: [make_event("E1", date(2024, 3, 1), date(2024, 3, 3))]}

        result = asyncio.run(reconciler_for(store, feeds, notifier).sync_unit("unit-1", dry_run=True))

        assert result.new_bookings == 1
        assert result.dry_run is True
        assert store.bookings == {}
        assert notifier.synced == []

    def test_unknown_unit(self, store):
        with pytest.raises(UnitNotFoundError):
            asyncio.run(reconciler_for(store, {}).sync_unit("missing"))

    def test_unit_without_feeds(self):
        store = InMemoryStore([Unit(id="bare", name="Bare")])

        result = asyncio.run(reconciler_for(store, {}).sync_unit("bare"))

        assert result.events == []
        assert result.new_bookings == 0


@pytest.mark.unit
class TestSyncAllUnits:
    """Scheduled sweep over every unit."""

    @pytest.fixture
    def two_units(self):
        return [
            Unit(id="u1", name="One", calendars={Platform.AIRBNB: "https://a.example/u1.ics"}),
            Unit(id="u2", name="Two", calendars={Platform.BOOKINGCOM: "https://b.example/u2.ics"}),
        ]

    def test_uid_is_imported_once_across_units(self, two_units):
        store = InMemoryStore(two_units)
        feeds = {
            "https://a.example/u1.ics": [make_event("S1", date(2024, 6, 1), date(2024, 6, 3))],
            "https://b.example/u2.ics": [make_event("S1", date(2024, 6, 1), date(2024, 6, 3)),
                                         make_event("S2", date(2024, 6, 5), date(2024, 6, 7))],
        }

        result = asyncio.run(reconciler_for(store, feeds).sync_all_units())

        assert sorted(b.uid for b in result.created_bookings) == ["S1", "S2"]
        assert result.duplicate_events == 1
        assert all(unit_id is None for _, unit_id in store.uid_lookups)

    def test_sweep_import_defaults(self, two_units):
        store = InMemoryStore(two_units[:1])
        feeds = {"https://a.example/u1.ics": [make_event("S1", date(2024, 6, 1), date(2024, 6, 3),
                                                         summary="Reserved")]}

        result = asyncio.run(reconciler_for(store, feeds).sync_all_units())

        booking = result.created_bookings[0]
        assert booking.payment_status == SWEEP_POLICY.payment_status == PaymentStatus.PENDING
        assert booking.adults == 1
        assert booking.guest_first_name == "Reserved"
        assert booking.guest_last_name == "(Airbnb)"

    def test_existing_uid_on_other_unit_is_skipped(self, two_units):
        store = InMemoryStore(two_units)
        store.seed(BookingData(unit_id="u2", uid="S1", check_in_date=date(2024, 6, 1),
                               check_out_date=date(2024, 6, 3)))
        feeds = {"https://a.example/u1.ics": [make_event("S1", date(2024, 6, 1), date(2024, 6, 3))]}

        result = asyncio.run(reconciler_for(store, feeds).sync_all_units())

        assert result.new_bookings == 0
        assert result.duplicate_events == 1
