"""
Immutable data models for API responses and requests.
"""
from typing import Optional, Dict, Any, List
from datetime import datetime, date, timezone
from pydantic import BaseModel, Field, ConfigDict, field_serializer, model_validator
from enum import Enum


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentStatus(str, Enum):
    """Payment status accepted on booking requests."""
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class APIResponse(BaseModel):
    """Base API response model."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    success: bool = Field(..., description="Whether the request was successful")
    message: str = Field(..., description="Response message")
    timestamp: datetime = Field(default_factory=_utcnow, description="Response timestamp")

    @field_serializer('timestamp')
    def serialize_timestamp(self, timestamp: datetime) -> str:
        return timestamp.isoformat()


class ErrorResponse(APIResponse):
    """Error response model."""
    error_code: Optional[str] = Field(None, description="Error code for debugging")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class HealthResponse(BaseModel):
    """Health check response model."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=_utcnow, description="Health check timestamp")
    version: str = Field(..., description="API version")
    dependencies: Dict[str, str] = Field(default_factory=dict, description="Dependency statuses")

    @field_serializer('timestamp')
    def serialize_timestamp(self, timestamp: datetime) -> str:
        return timestamp.isoformat()


class CreateBookingRequest(BaseModel):
    """Request model for a directly entered booking."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    unit_id: str = Field(..., min_length=1, description="Unit being booked")
    guest_first_name: str = Field(..., min_length=1, description="Guest first name")
    guest_last_name: str = Field("", description="Guest last name")
    guest_phone: str = Field("", description="Guest phone number")
    guest_email: str = Field("", description="Guest email")
    check_in_date: date = Field(..., description="Check-in date")
    check_out_date: date = Field(..., description="Check-out date (exclusive)")
    adults: int = Field(1, ge=1, description="Number of adults")
    children: int = Field(0, ge=0, description="Number of children")
    payment_status: PaymentStatus = Field(PaymentStatus.PENDING, description="Payment status")
    special_requests: str = Field("", description="Free-text guest requests")

    @model_validator(mode='after')
    def check_dates(self):
        if self.check_out_date <= self.check_in_date:
            raise ValueError("check_out_date must be after check_in_date")
        return self


class CreateBookingResponse(APIResponse):
    """Response model for creating a booking."""
    data: Dict[str, Any] = Field(..., description="Created booking details")


class BookingConflictResponse(APIResponse):
    """Returned when a requested stay overlaps a stored booking."""
    error_code: str = Field("BOOKING_CONFLICT", description="Error code")
    existing_booking: Dict[str, Any] = Field(..., description="First stored booking that overlaps")


class BookingListResponse(APIResponse):
    """Response model for a unit's bookings."""
    data: List[Dict[str, Any]] = Field(..., description="Bookings ordered by check-in")


class SyncResponse(APIResponse):
    """Response model for a calendar reconciliation run."""
    data: Dict[str, Any] = Field(..., description="Fetched events and run counters")
