"""
Booking API endpoints.
"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ..dependencies import get_booking_service
from ..models import BookingConflictResponse, CreateBookingRequest, CreateBookingResponse, ErrorResponse
from ..services.booking_service import BookingService


router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=CreateBookingResponse,
    summary="Create a new booking",
    description="Create a directly entered booking. Overlapping stays are rejected unless force=true.",
    responses={
        200: {"description": "Booking created successfully"},
        404: {"description": "Unit not found", "model": ErrorResponse},
        409: {"description": "Stay overlaps an existing booking", "model": BookingConflictResponse},
        422: {"description": "Invalid booking request", "model": ErrorResponse},
        500: {"description": "Internal server error", "model": ErrorResponse}
    }
)
async def create_booking(
    request: CreateBookingRequest,
    force: bool = Query(False, description="Create the booking even if the stay overlaps"),
    booking_service: BookingService = Depends(get_booking_service)
):
    """
    Create a new booking.

    Args:
        request: Booking creation request
        force: Operator override for the overlap check
        booking_service: Injected booking service

    Returns:
        Created booking, or a 409 body naming the overlapping booking
    """
    response = await booking_service.create_booking(request, force=force)
    if isinstance(response, BookingConflictResponse):
        return JSONResponse(status_code=409, content=response.model_dump(mode="json"))
    return response
