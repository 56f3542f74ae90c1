"""
Scheduled calendar sweep endpoint.
"""
from fastapi import APIRouter, Depends

from ...calendar_sync.reconciler import CalendarReconciler
from ..dependencies import get_reconciler
from ..models import ErrorResponse, SyncResponse
from ..security.cron_auth import verify_cron_secret


router = APIRouter(prefix="/cron", tags=["cron"])


@router.get(
    "/sync-all-calendars",
    response_model=SyncResponse,
    summary="Sync every unit's external calendars",
    dependencies=[Depends(verify_cron_secret)],
    responses={
        401: {"description": "Missing or wrong cron secret"},
        500: {"description": "Internal server error", "model": ErrorResponse}
    }
)
async def sync_all_calendars(
    reconciler: CalendarReconciler = Depends(get_reconciler)
) -> SyncResponse:
    result = await reconciler.sync_all_units()
    return SyncResponse(
        success=True,
        message=f"Sync complete. Created {result.new_bookings} new bookings.",
        data=result.to_dict(),
    )
