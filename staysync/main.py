"""
Command line orchestrator for external calendar synchronization.
"""
import asyncio
import click
from typing import Optional

from .calendar_integration.ical_fetcher import ICalFeedFetcher
from .calendar_sync.reconciler import CalendarReconciler
from .firebase_sync.firestore_client import FirestoreClient
from .notifications.notifier import Notifier
from .utils.errors import StaysyncError
from .utils.logger import setup_logger, SyncLogger


class CalendarSyncAutomation:
    """Runs one reconciliation pass for a unit or for every unit."""

    def __init__(self, log_level: str = "INFO", log_file: Optional[str] = None,
                 store: Optional[FirestoreClient] = None,
                 fetcher: Optional[ICalFeedFetcher] = None,
                 notifier: Optional[Notifier] = None):
        self.logger = setup_logger("calendar_sync", log_level, log_file)
        self.sync_logger = SyncLogger(self.logger)

        # Initialize components
        self.store = store or FirestoreClient()
        self.reconciler = CalendarReconciler(
            self.store,
            fetcher or ICalFeedFetcher(),
            notifier or Notifier(),
            sync_logger=self.sync_logger,
        )

    def sync(self, unit_id: Optional[str] = None, dry_run: bool = False) -> dict:
        """
        Reconcile external calendars into stored bookings.

        Args:
            unit_id: Unit to sync; every unit when omitted
            dry_run: Fetch and deduplicate only, without writes or notifications

        Returns:
            Dictionary with run results, or ``{'error': ...}`` on failure
        """
        try:
            if unit_id:
                result = asyncio.run(self.reconciler.sync_unit(unit_id, dry_run=dry_run))
            else:
                result = asyncio.run(self.reconciler.sync_all_units(dry_run=dry_run))
        except StaysyncError as e:
            self.sync_logger.log_error(e, "Calendar sync aborted")
            return {'error': str(e)}

        return result.to_dict()


@click.command()
@click.option('--unit-id', type=str,
              help='Sync a single unit instead of every unit')
@click.option('--dry-run', is_flag=True,
              help='Fetch and deduplicate without writing bookings or sending notifications')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              default='INFO', help='Logging level')
@click.option('--log-file', type=str,
              help='Log file path (optional)')
def main(unit_id, dry_run, log_level, log_file):
    """
    Staysync calendar sync.

    Imports stays from the Airbnb, Booking.com and direct iCal feeds
    configured on each unit into the booking store.
    """
    automation = CalendarSyncAutomation(log_level, log_file)
    results = automation.sync(unit_id=unit_id, dry_run=dry_run)

    if 'error' in results:
        click.echo(f"Error: {results['error']}")
        raise click.exceptions.Exit(1)

    automation.sync_logger.print_summary()

    click.echo("\nSync completed:")
    click.echo(f"  Events fetched: {len(results['events'])}")
    click.echo(f"  New bookings: {results['new_bookings']}")
    click.echo(f"  Already imported: {results['duplicate_events']}")
    click.echo(f"  Failed feeds: {len(results['failed_sources'])}")
    click.echo(f"  Import errors: {len(results['import_errors'])}")
    click.echo(f"  Notifications failed: {results['notifications_failed']}")

    if dry_run:
        click.echo("\n⚠️  DRY RUN MODE - No bookings were written")


if __name__ == "__main__":
    main()
