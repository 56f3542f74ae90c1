"""
Configuration settings for FastAPI application.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://localhost:3001", "http://127.0.0.1:3000"]


class FastAPISettings(BaseSettings):
    """FastAPI application settings with environment variable loading."""

    # Application settings
    app_name: str = Field(default="Staysync API", description="Application name")
    app_description: str = Field(default="Bookings, conflict checks and calendar sync for rental units", description="Application description")
    app_version: str = Field(default="1.0.0", description="Application version")

    # Server settings
    host: str = Field(default="127.0.0.1", description="Server host")
    port: int = Field(default=8000, description="Server port")
    environment: str = Field(default="development", description="Environment (development, staging, production)")

    # API settings
    api_version: str = Field(default="v1", description="API version")
    api_prefix: str = Field(default="/api", description="API prefix")

    # Security settings
    cors_origins_raw: Optional[str] = Field(
        default=None,
        description="Allowed CORS origins, comma separated",
        validation_alias="CORS_ORIGINS"
    )
    cron_secret: str = Field(default="", description="Bearer secret for the scheduled calendar sweep")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = {"extra": "ignore"}  # Allow extra fields from existing .env

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return str(v or "INFO").upper()

    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from environment variable or return default."""
        if not self.cors_origins_raw:
            return list(DEFAULT_CORS_ORIGINS)
        origins = [origin.strip() for origin in self.cors_origins_raw.split(',') if origin.strip()]
        return origins or list(DEFAULT_CORS_ORIGINS)


# Global settings instance
settings = FastAPISettings()
