"""
Configuration module for HealthTrack Service API.
Uses Pydantic BaseSettings for validation - app fails fast if required config is missing.
"""
import sys
import logging
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def _default_thresholds_file() -> str:
    """Path of the threshold tables bundled with the service."""
    return str(Path(__file__).parent / "thresholds.yaml")


class Settings(BaseSettings):
    """
    Application settings with validation.
    Required fields will cause the app to fail fast if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database Configuration
    healthtrack_db_dir: str = Field(default="data", description="Database directory")
    healthtrack_db_file: str = Field(default="healthtrack.db", description="Database filename")
    healthtrack_db_busy_timeout: int = Field(default=5000, description="SQLite busy timeout in milliseconds")

    # API Configuration
    healthtrack_host: str = Field(default="0.0.0.0", description="API host")
    healthtrack_port: int = Field(default=8000, description="API port")
    healthtrack_reload: bool = Field(default=False, description="Enable hot reload")

    # Statistics Configuration
    healthtrack_timezone: str = Field(
        default="UTC",
        description="IANA timezone used to group measurements into calendar days",
    )
    healthtrack_default_window_days: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Default statistics window length in days",
    )
    healthtrack_thresholds_file: str = Field(
        default_factory=_default_thresholds_file,
        description="YAML file with the clinical threshold tables",
    )

    # Logging Configuration
    healthtrack_log_level: str = Field(default="INFO", description="Log level name")
    healthtrack_log_format: str = Field(default="json", pattern="^(json|text)$", description="json or text")

    # API Authentication Configuration
    healthtrack_api_key: str = Field(
        ...,  # Required - no default means fail fast if missing
        description="API key for authenticating requests to the HealthTrack API",
        min_length=32,  # Enforce minimum key length for security
    )

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """
        Validate settings at startup and fail fast with clear error messages.
        """
        errors = []

        try:
            ZoneInfo(self.healthtrack_timezone)
        except (ZoneInfoNotFoundError, ValueError):
            errors.append(f"HEALTHTRACK_TIMEZONE '{self.healthtrack_timezone}' is not a known IANA timezone")

        if not Path(self.healthtrack_thresholds_file).is_file():
            errors.append(f"HEALTHTRACK_THRESHOLDS_FILE '{self.healthtrack_thresholds_file}' does not exist")

        if errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            logger.critical(error_msg)
            sys.exit(1)

        return self

    @property
    def database_path(self) -> str:
        """Get the full database path."""
        return str(Path(self.healthtrack_db_dir) / self.healthtrack_db_file)

    @property
    def display_timezone(self) -> ZoneInfo:
        """Timezone used for calendar-day grouping."""
        return ZoneInfo(self.healthtrack_timezone)

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.healthtrack_db_dir).mkdir(parents=True, exist_ok=True)


# Create global settings instance - fails fast if required config is missing
settings = Settings()

# Ensure directories exist on import
settings.ensure_directories()

DATABASE_PATH = settings.database_path
DATABASE_BUSY_TIMEOUT = settings.healthtrack_db_busy_timeout

API_HOST = settings.healthtrack_host
API_PORT = settings.healthtrack_port
API_RELOAD = settings.healthtrack_reload
