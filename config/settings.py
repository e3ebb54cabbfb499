"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    storage_table: str = Field(
        default="app_storage",
        min_length=1,
        description="Key-value table holding one JSON blob per collection"
    )

    # ===================
    # PDF CONVERSION
    # ===================
    pdf_converter_command: str = Field(
        default="python scripts/pdf_to_table.py",
        min_length=1,
        description="Command that turns a PDF path (appended) into a JSON table on stdout"
    )
    pdf_converter_timeout_seconds: int = Field(
        default=120,
        ge=5,
        le=900,
        description="Seconds before the PDF converter is killed"
    )

    # ===================
    # IMPORT SETTINGS
    # ===================
    import_warning_display_limit: int = Field(
        default=5,
        ge=0,
        le=50,
        description="Warnings shown literally in the import summary (beyond this only a count)"
    )
    preview_ttl_minutes: int = Field(
        default=30,
        ge=1,
        le=1440,
        description="Minutes an upload preview stays confirmable"
    )

    # ===================
    # DISCONTINUED RETENTION
    # ===================
    discontinued_retention_mode: str = Field(
        default="keep_all",
        pattern="^(keep_all|max_age|unreferenced)$",
        description="Pruning policy for the discontinued archive"
    )
    discontinued_retention_days: int = Field(
        default=180,
        ge=1,
        le=3650,
        description="Age in days after which unreferenced entries are pruned (max_age mode)"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache so settings are only loaded once.
    Call get_settings.cache_clear() to reload.
    """
    return Settings()


# Convenience export
settings = get_settings()
