"""
Booking service for handling booking-related business logic.
"""
from datetime import datetime, timezone
from typing import Tuple, Union

from ...bookings.conflicts import find_conflict
from ...firebase_sync.firestore_client import FirestoreClient
from ...notifications.notifier import Notifier
from ...utils.errors import InvalidBookingError, UnitNotFoundError
from ...utils.models import BookingData, Unit
from ..models import BookingConflictResponse, BookingListResponse, CreateBookingRequest, CreateBookingResponse


def quote_stay(unit: Unit, nights: int, adults: int, children: int) -> Tuple[float, float]:
    """
    Price a stay at the unit's base rate.

    Guests beyond the unit's base occupancy pay the extra guest fee per night.

    Returns:
        (nightly_rate, total_amount)
    """
    guests = adults + children
    if guests > unit.max_occupancy:
        raise InvalidBookingError(
            f"{guests} guests exceed the maximum occupancy of {unit.max_occupancy} for {unit.name}"
        )
    extra_guests = max(0, guests - unit.base_occupancy)
    nightly_rate = unit.rate + extra_guests * unit.extra_guest_fee
    return nightly_rate, round(nightly_rate * nights, 2)


class BookingService:
    """Service for handling booking operations."""

    def __init__(self, store: FirestoreClient, notifier: Notifier, logger):
        self.store = store
        self.notifier = notifier
        self.logger = logger

    async def create_booking(
        self,
        request: CreateBookingRequest,
        force: bool = False,
    ) -> Union[CreateBookingResponse, BookingConflictResponse]:
        """
        Create a directly entered booking after an overlap check.

        Args:
            request: Validated booking request (check-out after check-in)
            force: Operator override; insert even if the stay overlaps

        Returns:
            CreateBookingResponse, or BookingConflictResponse naming the first
            overlapping booking when the check fails and ``force`` is off

        Raises:
            UnitNotFoundError: if the unit does not exist
            InvalidBookingError: if the party does not fit the unit
            PersistenceError: if the booking cannot be read or written
        """
        unit = await self.store.get_unit(request.unit_id)
        if unit is None:
            raise UnitNotFoundError(request.unit_id)

        candidate = BookingData(
            unit_id=unit.id,
            guest_first_name=request.guest_first_name,
            guest_last_name=request.guest_last_name,
            guest_phone=request.guest_phone,
            guest_email=request.guest_email,
            check_in_date=request.check_in_date,
            check_out_date=request.check_out_date,
            adults=request.adults,
            children=request.children,
            payment_status=request.payment_status.value,
            special_requests=request.special_requests,
            created_at=datetime.now(timezone.utc),
        )
        candidate.nightly_rate, candidate.total_amount = quote_stay(
            unit, candidate.nights, request.adults, request.children
        )

        existing = await self.store.get_bookings_for_unit(unit.id)
        conflict = find_conflict(candidate, existing)
        if conflict is not None:
            if not force:
                self.logger.info("Booking conflict detected", unit_id=unit.id,
                                 existing_booking_id=conflict.id)
                return BookingConflictResponse(
                    success=False,
                    message="Booking conflict detected.",
                    existing_booking=self._serialize(conflict),
                )
            self.logger.warning("Booking conflict overridden", unit_id=unit.id,
                                existing_booking_id=conflict.id)

        booking = await self.store.add_booking(candidate)

        notification = await self.notifier.notify_new_booking(booking, unit)
        if not notification.success:
            self.logger.warning("New booking notification failed", booking_id=booking.id,
                                reason=notification.message)

        return CreateBookingResponse(
            success=True,
            message="Booking created successfully",
            data=self._serialize(booking),
        )

    async def get_unit_bookings(self, unit_id: str) -> BookingListResponse:
        """
        List a unit's bookings ordered by check-in.

        Raises:
            UnitNotFoundError: if the unit does not exist
        """
        unit = await self.store.get_unit(unit_id)
        if unit is None:
            raise UnitNotFoundError(unit_id)

        bookings = sorted(await self.store.get_bookings_for_unit(unit_id),
                          key=lambda b: b.check_in_date)
        return BookingListResponse(
            success=True,
            message=f"Bookings retrieved for unit {unit.name}",
            data=[self._serialize(b) for b in bookings],
        )

    @staticmethod
    def _serialize(booking: BookingData) -> dict:
        data = booking.to_dict()
        data['id'] = booking.id
        return data
