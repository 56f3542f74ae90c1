"""
Firebase Firestore client for units and bookings.
"""
import hashlib
from typing import Optional, Dict, Any, List, Iterable, Set

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.api_core.exceptions import AlreadyExists, GoogleAPICallError
from google.cloud.firestore import FieldFilter

from ..utils.errors import PersistenceError
from ..utils.logger import get_logger
from ..utils.models import BookingData, Unit, SyncResult
from config.settings import firebase_config, app_config, sync_config


def synced_booking_id(uid: str) -> str:
    """Deterministic document id for a booking imported from a feed."""
    return "ical_" + hashlib.sha256(uid.encode("utf-8")).hexdigest()[:40]


def chunked(values: List[str], size: int) -> Iterable[List[str]]:
    """Split values into consecutive chunks of at most ``size`` items."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    for i in range(0, len(values), size):
        yield values[i:i + size]


class FirestoreClient:
    """Async Firestore access for units and bookings."""

    def __init__(self, db=None, chunk_size: Optional[int] = None):
        self.logger = get_logger("firestore_client")
        self.db = db
        self.initialized = db is not None
        self.chunk_size = chunk_size or sync_config.membership_query_chunk_size

    def initialize(self) -> bool:
        """
        Initialize Firebase Admin SDK and the async Firestore client.

        Returns:
            True if initialization successful, False otherwise
        """
        if self.initialized:
            return True
        try:
            cred_dict = firebase_config.get_credentials_dict()
            if not cred_dict.get('project_id'):
                self.logger.error("Firebase project ID not configured")
                return False

            if not firebase_admin._apps:
                firebase_admin.initialize_app(credentials.Certificate(cred_dict))

            self.db = firestore_async.client()
            self.initialized = True
            self.logger.info("Firebase Firestore client initialized successfully",
                             project_id=cred_dict.get('project_id'))
            return True
        except Exception as e:
            self.logger.error("Failed to initialize Firebase Firestore", error=str(e))
            self.initialized = False
            return False

    def _require_db(self):
        if not self.initialized and not self.initialize():
            raise PersistenceError("Firestore client is not initialized")
        return self.db

    def _bookings(self):
        return self._require_db().collection(app_config.bookings_collection)

    def _units(self):
        return self._require_db().collection(app_config.units_collection)

    # Units

    async def get_unit(self, unit_id: str) -> Optional[Unit]:
        """Get a unit by id, or None if it does not exist."""
        try:
            doc = await self._units().document(unit_id).get()
        except GoogleAPICallError as e:
            self.logger.error("Error getting unit", unit_id=unit_id, error=str(e))
            raise PersistenceError(f"Failed to read unit {unit_id}: {e}") from e

        if not doc.exists:
            return None
        return Unit.from_dict(doc.id, doc.to_dict() or {})

    async def list_units(self) -> List[Unit]:
        """Get every managed unit. Units with invalid data are skipped."""
        try:
            docs = await self._units().get()
        except GoogleAPICallError as e:
            self.logger.error("Error listing units", error=str(e))
            raise PersistenceError(f"Failed to list units: {e}") from e

        units = []
        for doc in docs:
            try:
                units.append(Unit.from_dict(doc.id, doc.to_dict() or {}))
            except ValueError as e:
                self.logger.warning("Skipping invalid unit document", unit_id=doc.id, error=str(e))
        return units

    # Bookings

    async def get_bookings_for_unit(self, unit_id: str) -> List[BookingData]:
        """Get all bookings of a unit. Bookings with invalid data are skipped."""
        query = self._bookings().where(filter=FieldFilter('unit_id', '==', unit_id))
        try:
            docs = await query.get()
        except GoogleAPICallError as e:
            self.logger.error("Error getting bookings for unit", unit_id=unit_id, error=str(e))
            raise PersistenceError(f"Failed to read bookings for unit {unit_id}: {e}") from e

        bookings = []
        for doc in docs:
            try:
                bookings.append(BookingData.from_dict(doc.to_dict() or {}, booking_id=doc.id))
            except ValueError as e:
                self.logger.warning("Skipping invalid booking document", booking_id=doc.id, error=str(e))
        self.logger.info("Retrieved bookings for unit", unit_id=unit_id, count=len(bookings))
        return bookings

    async def find_existing_uids(self, uids: Iterable[str], unit_id: Optional[str] = None) -> Set[str]:
        """
        Return the subset of external uids already stored as bookings.

        Firestore caps 'in' filters, so the uids are queried in chunks of
        ``chunk_size`` and the matches unioned. ``unit_id`` scopes the lookup
        to one unit; without it the lookup is global.
        """
        distinct = sorted({uid for uid in uids if uid})
        existing: Set[str] = set()
        if not distinct:
            return existing

        for chunk in chunked(distinct, self.chunk_size):
            query = self._bookings()
            if unit_id is not None:
                query = query.where(filter=FieldFilter('unit_id', '==', unit_id))
            query = query.where(filter=FieldFilter('uid', 'in', chunk)).select(['uid'])
            try:
                docs = await query.get()
            except GoogleAPICallError as e:
                self.logger.error("Error looking up booking uids", unit_id=unit_id,
                                  chunk_size=len(chunk), error=str(e))
                raise PersistenceError(f"Failed to look up booking uids: {e}") from e

            for doc in docs:
                uid = (doc.to_dict() or {}).get('uid')
                if uid:
                    existing.add(uid)

        self.logger.debug("Looked up existing booking uids", requested=len(distinct),
                          found=len(existing), unit_id=unit_id)
        return existing

    async def add_booking(self, booking: BookingData) -> BookingData:
        """
        Insert a directly entered booking under a generated id.

        Raises:
            PersistenceError: if the write is rejected
        """
        try:
            _, doc_ref = await self._bookings().add(booking.to_dict())
        except GoogleAPICallError as e:
            self.logger.error("Error adding booking", unit_id=booking.unit_id, error=str(e))
            raise PersistenceError(f"Failed to create booking: {e}") from e

        booking.id = doc_ref.id
        self.logger.info("Successfully added booking", booking_id=booking.id, unit_id=booking.unit_id)
        return booking

    async def create_synced_booking(self, booking: BookingData, dry_run: bool = False) -> SyncResult:
        """
        Insert a feed-imported booking keyed by its external uid.

        The document id is derived from the uid and written with ``create``,
        so a concurrent run importing the same event gets ``is_new=False``
        instead of a second booking.
        """
        if not booking.uid:
            return SyncResult(success=False, error_message="Synced booking has no uid")

        doc_id = synced_booking_id(booking.uid)
        if dry_run:
            self.logger.info("DRY RUN: Would import booking", uid=booking.uid, unit_id=booking.unit_id)
            booking.id = doc_id
            return SyncResult(success=True, is_new=True, booking_data=booking, uid=booking.uid)

        try:
            await self._bookings().document(doc_id).create(booking.to_dict())
        except AlreadyExists:
            self.logger.info("Booking already imported", uid=booking.uid, unit_id=booking.unit_id)
            return SyncResult(success=True, is_new=False, booking_data=booking, uid=booking.uid)
        except GoogleAPICallError as e:
            self.logger.error("Error importing booking", uid=booking.uid, error=str(e))
            return SyncResult(success=False, error_message=str(e), booking_data=booking, uid=booking.uid)

        booking.id = doc_id
        self.logger.info("Successfully imported booking", uid=booking.uid, unit_id=booking.unit_id)
        return SyncResult(success=True, is_new=True, booking_data=booking, uid=booking.uid)
