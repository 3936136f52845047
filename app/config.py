# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 secret used to verify Supabase access tokens"
    )

    STORAGE_BUCKET: str = Field(
        default="paste-files",
        min_length=1,
        description="Supabase Storage bucket holding uploaded file bytes"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for the Celery expiry sweep)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Paste Expiry Policy
    # -------------------------------------------------------------------------

    GUEST_MAX_EXPIRY_DAYS: int = Field(
        default=7,
        ge=1,
        description="Hard lifetime ceiling for pastes created without an account"
    )

    USER_MAX_EXPIRY_DAYS: int = Field(
        default=30,
        ge=1,
        description="Longest explicit expiry an authenticated user may choose"
    )

    DEFAULT_EXPIRY_DAYS: int = Field(
        default=7,
        ge=1,
        description="Lifetime applied when the request names no expiry"
    )

    EXTEND_EXPIRY_ON_VIEW: bool = Field(
        default=False,
        description="Push expires_at forward on every successful read (rolling expiry)"
    )

    # -------------------------------------------------------------------------
    # Identifiers
    # -------------------------------------------------------------------------

    PASTE_ID_BYTES: int = Field(
        default=8,
        ge=6,
        le=9,
        description="Random bytes per paste id (8 bytes -> 11 URL-safe characters)"
    )

    # -------------------------------------------------------------------------
    # File Upload Settings
    # -------------------------------------------------------------------------

    MAX_UPLOAD_SIZE_MB: int = Field(
        default=5,
        ge=1,
        le=500,
        description="Maximum file upload size in MB"
    )

    # -------------------------------------------------------------------------
    # Expiry Sweep (Celery beat)
    # -------------------------------------------------------------------------

    SWEEP_INTERVAL_MINUTES: int = Field(
        default=60,
        ge=1,
        description="How often the worker purges expired pastes"
    )

    SWEEP_BATCH_SIZE: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Max expired pastes removed per sweep run"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_expiry_bounds(self) -> "Settings":
        # Guests can never outlive users, and the default must fit both ceilings
        if self.GUEST_MAX_EXPIRY_DAYS > self.USER_MAX_EXPIRY_DAYS:
            raise ValueError("GUEST_MAX_EXPIRY_DAYS cannot exceed USER_MAX_EXPIRY_DAYS")
        if self.DEFAULT_EXPIRY_DAYS > self.USER_MAX_EXPIRY_DAYS:
            raise ValueError("DEFAULT_EXPIRY_DAYS cannot exceed USER_MAX_EXPIRY_DAYS")
        return self

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://takob.in" -> ["http://localhost:3000", "https://takob.in"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def max_upload_size_bytes(self) -> int:
        """Convert MB to bytes for file size validation."""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
