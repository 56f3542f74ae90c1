"""
Reconciliation of external calendar feeds into stored bookings.

A run fetches every configured feed of a unit concurrently, drops events
whose uid is already stored, imports the rest as bookings and announces each
import. Imported events are trusted as confirmed on their origin platform, so
no overlap check is applied to them.
"""
import asyncio
from typing import List, Optional, Set

from ..calendar_integration.ical_fetcher import ICalFeedFetcher
from ..firebase_sync.firestore_client import FirestoreClient
from ..notifications.notifier import Notifier
from ..utils.errors import UnitNotFoundError
from ..utils.logger import get_logger, SyncLogger
from ..utils.models import (
    BookingData, ImportPolicy, PaymentStatus, ReconciliationResult,
    SourceFetchResult, SyncedEvent, Unit
)


# Per-unit sync is started by an operator looking at the unit, and feeds
# only carry confirmed stays, so imports are recorded as paid.
UNIT_SYNC_POLICY = ImportPolicy(
    name="unit_sync",
    payment_status=PaymentStatus.PAID,
    adults=0,
    guest_first_name="Synced",
    guest_last_name="{platform}",
    special_requests="Synced from {platform}: {summary}",
    require_summary=True,
)

# The scheduled sweep has no operator behind it; imports wait for review.
SWEEP_POLICY = ImportPolicy(
    name="sweep",
    payment_status=PaymentStatus.PENDING,
    adults=1,
    guest_first_name="{summary}",
    guest_last_name="({platform})",
    special_requests="Synced from {platform}. Original summary: {summary}",
    require_summary=False,
)


class CalendarReconciler:
    """Fetch, deduplicate and import external calendar events."""

    def __init__(
        self,
        store: FirestoreClient,
        fetcher: ICalFeedFetcher,
        notifier: Notifier,
        sync_logger: Optional[SyncLogger] = None,
    ):
        self.store = store
        self.fetcher = fetcher
        self.notifier = notifier
        self.logger = get_logger("calendar_reconciler")
        self.sync_logger = sync_logger or SyncLogger(self.logger)

    async def sync_unit(self, unit_id: str, dry_run: bool = False) -> ReconciliationResult:
        """
        Reconcile every feed of one unit.

        Raises:
            UnitNotFoundError: if the unit does not exist
            PersistenceError: if the booking store cannot be read
        """
        unit = await self.store.get_unit(unit_id)
        if unit is None:
            raise UnitNotFoundError(unit_id)

        self.logger.info("Starting unit calendar sync", unit_id=unit_id, dry_run=dry_run)
        return await self._reconcile_unit(unit, UNIT_SYNC_POLICY, scope_to_unit=True,
                                          seen_uids=set(), dry_run=dry_run)

    async def sync_all_units(self, dry_run: bool = False) -> ReconciliationResult:
        """
        Reconcile the feeds of every managed unit.

        Known uids are looked up globally, and a uid imported for one unit is
        not imported again for another unit in the same sweep.
        """
        units = await self.store.list_units()
        self.logger.info("Starting calendar sweep", units=len(units), dry_run=dry_run)

        total = ReconciliationResult(dry_run=dry_run)
        seen_uids: Set[str] = set()
        for unit in units:
            result = await self._reconcile_unit(unit, SWEEP_POLICY, scope_to_unit=False,
                                                seen_uids=seen_uids, dry_run=dry_run)
            total.merge(result)

        self.logger.info("Calendar sweep completed", units=len(units),
                         new_bookings=total.new_bookings, failed_sources=len(total.failed_sources))
        return total

    async def fetch_unit_events(self, unit: Unit, require_summary: bool = True) -> List[SourceFetchResult]:
        """Fetch all configured feeds of a unit concurrently, one result per feed."""
        sources = unit.configured_calendars()
        outcomes = await asyncio.gather(
            *(self.fetcher.fetch_source(platform, url, require_summary=require_summary)
              for platform, url in sources),
            return_exceptions=True,
        )

        results = []
        for (platform, url), outcome in zip(sources, outcomes):
            if isinstance(outcome, Exception):
                outcome = SourceFetchResult(platform=platform, url=url,
                                            error_message=str(outcome) or type(outcome).__name__)
            elif isinstance(outcome, BaseException):
                raise outcome

            if outcome.success:
                self.sync_logger.log_feed_fetched(platform.value, unit.id, len(outcome.events))
            else:
                self.sync_logger.log_feed_failed(platform.value, unit.id, outcome.error_message)
            results.append(outcome)
        return results

    @staticmethod
    def build_booking(event: SyncedEvent, unit: Unit, policy: ImportPolicy) -> BookingData:
        """Turn an external event into a booking; feeds carry no guest or payment data."""
        return BookingData(
            unit_id=unit.id,
            uid=event.uid,
            guest_first_name=policy.render(policy.guest_first_name, event),
            guest_last_name=policy.render(policy.guest_last_name, event),
            check_in_date=event.start,
            check_out_date=event.end,
            adults=policy.adults,
            children=0,
            nightly_rate=unit.rate,
            total_amount=0.0,
            payment_status=policy.payment_status,
            special_requests=policy.render(policy.special_requests, event),
        )

    async def _reconcile_unit(
        self,
        unit: Unit,
        policy: ImportPolicy,
        scope_to_unit: bool,
        seen_uids: Set[str],
        dry_run: bool,
    ) -> ReconciliationResult:
        sources = await self.fetch_unit_events(unit, require_summary=policy.require_summary)
        events = [event for source in sources for event in source.events]
        result = ReconciliationResult(
            unit_id=unit.id,
            events=events,
            failed_sources=[f"{unit.id}:{s.platform.value}" for s in sources if not s.success],
            dry_run=dry_run,
        )

        candidate_uids = {event.uid for event in events}
        known = await self.store.find_existing_uids(
            candidate_uids - seen_uids,
            unit_id=unit.id if scope_to_unit else None,
        )
        known |= candidate_uids & seen_uids

        for event in events:
            if event.uid in known:
                result.duplicate_events += 1
                self.sync_logger.log_duplicate_event(event.uid, unit.id)
                continue
            # Same uid in two feeds of one run: first occurrence wins
            known.add(event.uid)
            seen_uids.add(event.uid)

            booking = self.build_booking(event, unit, policy)
            sync_result = await self.store.create_synced_booking(booking, dry_run=dry_run)
            if not sync_result.success:
                message = f"{event.uid}: {sync_result.error_message}"
                result.import_errors.append(message)
                self.sync_logger.log_error(Exception(sync_result.error_message),
                                           f"Import failed for {event.uid} on unit {unit.id}")
                continue
            if not sync_result.is_new:
                result.duplicate_events += 1
                self.sync_logger.log_duplicate_event(event.uid, unit.id)
                continue

            result.created_bookings.append(sync_result.booking_data)
            self.sync_logger.log_new_booking(sync_result.booking_data.to_dict())
            if dry_run:
                continue

            notification = await self.notifier.notify_synced_booking(
                sync_result.booking_data, unit, event.platform.value if event.platform else "calendar"
            )
            self.sync_logger.log_notification(notification.success, event.uid)
            if notification.success:
                result.notifications_sent += 1
            else:
                result.notifications_failed += 1

        seen_uids.update(candidate_uids)
        self.logger.info("Unit calendar sync completed", unit_id=unit.id, policy=policy.name,
                         events=len(events), new_bookings=result.new_bookings,
                         duplicates=result.duplicate_events, failed_sources=len(result.failed_sources))
        return result
