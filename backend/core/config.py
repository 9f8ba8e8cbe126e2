"""
Configuration management for the occupancy backend.

Settings are read from environment variables (or a local .env file) so the
same build can run against development and production databases.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    The occupancy_* values are venue-wide defaults; a venue may override them
    through its row in venue_occupancy_settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database Configuration
    database_url: str = "sqlite:///./venue_ops.db"
    database_test_url: Optional[str] = None
    log_sql_queries: bool = False

    # Environment Settings
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Occupancy engine defaults
    occupancy_buffer_minutes: int = 15  # turnover/cleaning time between parties
    occupancy_default_session_duration_minutes: int = 120
    occupancy_risk_lookahead_minutes: int = 120  # low risk beyond this is not surfaced
    occupancy_parallel_tables: bool = False
    occupancy_max_workers: int = 4

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @field_validator(
        "occupancy_buffer_minutes",
        "occupancy_default_session_duration_minutes",
        "occupancy_risk_lookahead_minutes",
        "occupancy_max_workers",
    )
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance with environment variables loaded
    """
    return Settings()


# Export settings instance for easy import
settings = get_settings()
