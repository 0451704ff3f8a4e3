"""
Core module for application configuration, logging, and shared infrastructure.

This module provides:
- Settings: Application configuration via pydantic-settings
- Dependency injection: FastAPI Depends() functions for services and repositories
- Exceptions: Domain-specific exception classes with HTTP status codes
- Datetime utilities: UTC-first datetime handling and calendar-day windows
- Threshold tables: clinical status boundaries loaded from YAML
"""
from core.config import settings, Settings

from core.dependencies import (
    get_database,
    get_threshold_tables,
    get_status_classifier,
    get_user_repository,
    get_measurement_repository,
    get_user_service,
    get_measurement_service,
    get_statistics_service,
    get_export_service,
    reset_database,
)

from core.exceptions import (
    HealthTrackError,
    UserNotFoundError,
    DuplicateUserError,
    InvalidRoleError,
    MeasurementNotFoundError,
    InvalidMeasurementDataError,
    DatabaseError,
    setup_exception_handlers,
)

from core.datetime_utils import (
    utc_now,
    to_utc,
    parse_datetime,
    format_iso,
    day_window,
    previous_day_window,
)

from core.thresholds import (
    ThresholdBand,
    ThresholdTables,
    load_threshold_tables,
)

__all__ = [
    # Settings
    "settings",
    "Settings",
    # Dependency injection
    "get_database",
    "get_threshold_tables",
    "get_status_classifier",
    "get_user_repository",
    "get_measurement_repository",
    "get_user_service",
    "get_measurement_service",
    "get_statistics_service",
    "get_export_service",
    "reset_database",
    # Exceptions
    "HealthTrackError",
    "UserNotFoundError",
    "DuplicateUserError",
    "InvalidRoleError",
    "MeasurementNotFoundError",
    "InvalidMeasurementDataError",
    "DatabaseError",
    "setup_exception_handlers",
    # Datetime utilities
    "utc_now",
    "to_utc",
    "parse_datetime",
    "format_iso",
    "day_window",
    "previous_day_window",
    # Thresholds
    "ThresholdBand",
    "ThresholdTables",
    "load_threshold_tables",
]
