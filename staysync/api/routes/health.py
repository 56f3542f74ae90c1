"""
Health check and monitoring endpoints.
"""
from fastapi import APIRouter, Request

from ..config import settings
from ..models import HealthResponse


router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description="Check if the API is running and healthy",
    responses={
        200: {"description": "Service is healthy"}
    }
)
async def health_check(request: Request) -> HealthResponse:
    """
    Health check endpoint for monitoring.

    Returns:
        Health status information
    """
    services = getattr(request.app.state, "services", None)
    firestore_status = "connected" if services and services.store.initialized else "unavailable"
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        dependencies={"firestore": firestore_status}
    )
