"""
Configuration management for the stock event calendar using Pydantic Settings.

Loads configuration from environment variables with type validation and sane defaults.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode")

    # Database
    database_url: str = Field(default="sqlite:///./stockcal.db", description="SQLAlchemy connection URL")

    # Identity cookie
    user_cookie_name: str = Field(default="userId", description="Cookie carrying the opaque per-browser user id")
    user_cookie_max_age: int = Field(default=60 * 60 * 24 * 365, description="Identity cookie lifetime (seconds)")

    # Local placement storage
    kv_store_path: str = Field(default=".cache/kv_store.json", description="JSON file backing the per-user key-value store")
    recent_searches_limit: int = Field(default=5, description="Recent ticker searches kept per user")

    # Recommendations
    recommendation_max_results: int = Field(default=12, description="Maximum recommendations returned")
    recommendation_min_results: int = Field(default=8, description="Backfill target when few stocks score")

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting")
    portfolio_sync_window_seconds: int = Field(default=60, description="Minimum seconds between portfolio syncs per user")

    # Logging
    log_level: str = Field(default="INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    log_format: str = Field(default="text", description="Log format: json or text")
    log_file: str = Field(default="", description="Log file path (empty disables file logging)")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")
        return level

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"


# Global settings instance
settings = Settings()
