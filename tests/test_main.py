"""
Unit tests for the command line orchestrator.
"""
from datetime import date
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from conftest import InMemoryStore, RecordingNotifier, StaticFetcher, make_event
from staysync.main import CalendarSyncAutomation, main
from staysync.utils.errors import PersistenceError

AIRBNB = "https://airbnb.example/unit-1.ics"


@pytest.fixture
def automation(store):
    fetcher = StaticFetcher({AIRBNB: [make_event("E1", date(2024, 3, 1), date(2024, 3, 3))]})
    return CalendarSyncAutomation(store=store, fetcher=fetcher, notifier=RecordingNotifier())


class TestCalendarSyncAutomation:
    """Test cases for CalendarSyncAutomation."""

    def test_sync_single_unit(self, automation, store):
        results = automation.sync(unit_id="unit-1")

        assert results["new_bookings"] == 1
        assert results["unit_id"] == "unit-1"
        assert len(store.bookings) == 1
        assert automation.sync_logger.stats["new_bookings"] == 1

    def test_sync_all_units(self, automation):
        results = automation.sync()

        assert results["new_bookings"] == 1
        assert results["unit_id"] is None

    def test_dry_run(self, automation, store):
        results = automation.sync(unit_id="unit-1", dry_run=True)

        assert results["dry_run"] is True
        assert store.bookings == {}

    def test_unknown_unit_is_reported(self, automation):
        results = automation.sync(unit_id="missing")

        assert "Unit not found" in results["error"]

    def test_store_failure_is_reported(self, automation, store):
        async def broken():
            raise PersistenceError("Firestore client is not initialized")

        store.list_units = broken

        assert "not initialized" in automation.sync()["error"]


class TestCLI:
    """Test cases for the click entry point."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])

        assert result.exit_code == 0
        assert "--unit-id" in result.output
        assert "--dry-run" in result.output

    @patch("staysync.main.CalendarSyncAutomation")
    def test_unit_sync_output(self, mock_automation_cls, runner):
        instance = mock_automation_cls.return_value
        instance.sync.return_value = {
            "unit_id": "unit-1", "events": [{}, {}], "new_bookings": 1, "duplicate_events": 1,
            "failed_sources": [], "import_errors": [], "notifications_sent": 1,
            "notifications_failed": 0, "dry_run": True,
        }
        instance.sync_logger = Mock()

        result = runner.invoke(main, ["--unit-id", "unit-1", "--dry-run"])

        assert result.exit_code == 0
        instance.sync.assert_called_once_with(unit_id="unit-1", dry_run=True)
        assert "New bookings: 1" in result.output
        assert "DRY RUN MODE" in result.output
        instance.sync_logger.print_summary.assert_called_once()

    @patch("staysync.main.CalendarSyncAutomation")
    def test_error_exits_non_zero(self, mock_automation_cls, runner):
        mock_automation_cls.return_value.sync.return_value = {"error": "Unit not found: x"}

        result = runner.invoke(main, ["--unit-id", "x"])

        assert result.exit_code == 1
        assert "Error: Unit not found: x" in result.output
