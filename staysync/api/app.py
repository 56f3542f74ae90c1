"""
Main FastAPI application factory.
"""
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from .config import settings
from .dependencies import ServiceContainer, build_services
from .routes import bookings, cron, health, ical, units
from .models import ErrorResponse
from ..utils.errors import InvalidBookingError, PersistenceError, StaysyncError, UnitNotFoundError


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

_ERROR_STATUS = [
    (UnitNotFoundError, 404, "UNIT_NOT_FOUND"),
    (InvalidBookingError, 422, "INVALID_BOOKING"),
    (PersistenceError, 500, "PERSISTENCE_ERROR"),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    logger.info("Starting FastAPI application")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"API Version: {settings.api_version}")

    if getattr(app.state, "services", None) is None:
        app.state.services = build_services()

    if app.state.services.store.initialize():
        logger.info("Services initialized successfully")
    else:
        logger.error("Firestore is unavailable; storage-backed endpoints will fail")

    yield

    # Shutdown
    logger.info("Shutting down FastAPI application")


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        services: Prebuilt service container; built at startup when omitted

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title=settings.app_name,
        description=settings.app_description,
        version=settings.app_version,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan
    )
    app.state.services = services

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(StaysyncError)
    async def domain_exception_handler(request: Request, exc: StaysyncError):
        """Map domain errors to HTTP statuses."""
        status_code, error_code = 500, "INTERNAL_ERROR"
        for error_type, status, code in _ERROR_STATUS:
            if isinstance(exc, error_type):
                status_code, error_code = status, code
                break
        if status_code >= 500:
            logger.error(f"Request failed: {exc}")
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                success=False,
                message=str(exc),
                error_code=error_code,
            ).model_dump()
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                success=False,
                message="Internal server error",
                error_code="INTERNAL_ERROR",
                details={"error": str(exc)}
            ).model_dump()
        )

    # Include routers with versioning
    for module in (bookings, units, cron, ical, health):
        app.include_router(
            module.router,
            prefix=f"{settings.api_prefix}/{settings.api_version}"
        )

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "message": "Staysync API is running",
            "version": settings.app_version,
            "environment": settings.environment,
            "docs": f"{settings.api_prefix}/docs"
        }

    return app
