"""
Service container and request dependencies for the FastAPI application.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from ..calendar_integration.ical_fetcher import ICalFeedFetcher
from ..calendar_sync.reconciler import CalendarReconciler
from ..firebase_sync.firestore_client import FirestoreClient
from ..notifications.notifier import Notifier
from ..utils.logger import get_logger
from .services.booking_service import BookingService
from .services.unit_service import UnitService


@dataclass
class ServiceContainer:
    """Everything a request handler may need, built once per application."""
    store: FirestoreClient
    fetcher: ICalFeedFetcher
    notifier: Notifier
    reconciler: CalendarReconciler
    booking_service: BookingService
    unit_service: UnitService


def build_services(
    store: Optional[FirestoreClient] = None,
    fetcher: Optional[ICalFeedFetcher] = None,
    notifier: Optional[Notifier] = None,
) -> ServiceContainer:
    """Wire the services together; any collaborator can be supplied for tests."""
    logger = get_logger("fastapi_app")
    store = store or FirestoreClient()
    fetcher = fetcher or ICalFeedFetcher()
    notifier = notifier or Notifier()
    return ServiceContainer(
        store=store,
        fetcher=fetcher,
        notifier=notifier,
        reconciler=CalendarReconciler(store, fetcher, notifier),
        booking_service=BookingService(store, notifier, logger),
        unit_service=UnitService(store, logger),
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_booking_service(request: Request) -> BookingService:
    """Get the booking service of the running application."""
    return get_services(request).booking_service


def get_unit_service(request: Request) -> UnitService:
    """Get the unit service of the running application."""
    return get_services(request).unit_service


def get_reconciler(request: Request) -> CalendarReconciler:
    """Get the calendar reconciler of the running application."""
    return get_services(request).reconciler
