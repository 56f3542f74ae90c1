"""
Unit endpoints: booking listing and on-demand calendar sync.
"""
from fastapi import APIRouter, Depends, Query

from ...calendar_sync.reconciler import CalendarReconciler
from ..dependencies import get_booking_service, get_reconciler
from ..models import BookingListResponse, ErrorResponse, SyncResponse
from ..services.booking_service import BookingService


router = APIRouter(prefix="/units", tags=["units"])


@router.get(
    "/{unit_id}/bookings",
    response_model=BookingListResponse,
    summary="List a unit's bookings",
    responses={
        404: {"description": "Unit not found", "model": ErrorResponse}
    }
)
async def get_unit_bookings(
    unit_id: str,
    booking_service: BookingService = Depends(get_booking_service)
) -> BookingListResponse:
    return await booking_service.get_unit_bookings(unit_id)


@router.post(
    "/{unit_id}/sync",
    response_model=SyncResponse,
    summary="Sync a unit's external calendars",
    description="Fetch the unit's Airbnb, Booking.com and direct feeds and import new stays.",
    responses={
        404: {"description": "Unit not found", "model": ErrorResponse},
        500: {"description": "Internal server error", "model": ErrorResponse}
    }
)
async def sync_unit_calendars(
    unit_id: str,
    dry_run: bool = Query(False, description="Fetch and deduplicate only; write nothing"),
    reconciler: CalendarReconciler = Depends(get_reconciler)
) -> SyncResponse:
    """
    Reconcile one unit's external calendars.

    Feeds that fail are reported in ``failed_sources``; the remaining feeds
    are still imported.
    """
    result = await reconciler.sync_unit(unit_id, dry_run=dry_run)
    return SyncResponse(
        success=True,
        message=f"Synced {len(result.events)} events, {result.new_bookings} new bookings",
        data=result.to_dict(),
    )
