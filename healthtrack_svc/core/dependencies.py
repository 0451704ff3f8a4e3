"""
FastAPI Dependency Injection configuration for HealthTrack API.

This module provides the dependency injection (DI) infrastructure. It enables:
- Clean separation between API, Service, and Repository layers
- Easy testing with fake dependencies via app.dependency_overrides
- Centralized construction of the threshold tables and classifier

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (Business Logic, statistics core)
         ↓ Injected
    Repository Layer (Data Access)
         ↓ Injected
    Database (SQLite Connection)

Usage in Routers:
    from core.dependencies import get_measurement_service

    @router.post("/measurements/glucose")
    async def record_glucose(
        body: GlucoseCreate,
        measurement_service: MeasurementService = Depends(get_measurement_service)
    ):
        return measurement_service.record(...)

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_measurement_service] = lambda: test_service
"""
import logging
from typing import Optional

from core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# DATABASE DEPENDENCY
# =============================================================================

# Lazy import to avoid circular dependencies
_database_instance: Optional["Database"] = None


def get_database() -> "Database":
    """
    Get the database instance (created once, then reused).

    Returns:
        Database: The configured database instance (WAL mode, busy timeout).
    """
    global _database_instance

    if _database_instance is None:
        from repositories.base import Database

        logger.info(f"Initializing database: {settings.database_path}")
        _database_instance = Database(
            db_path=settings.database_path,
            busy_timeout=settings.healthtrack_db_busy_timeout
        )
        logger.info("Database initialized successfully")

    return _database_instance


def reset_database() -> None:
    """
    Reset the database instance (for testing only).

    This allows tests to inject a fresh database instance.
    """
    global _database_instance
    _database_instance = None


# =============================================================================
# THRESHOLDS & CLASSIFIER
# =============================================================================

def get_threshold_tables() -> "ThresholdTables":
    """
    Get the threshold tables loaded from the configured YAML file.

    The loader is cached, so the file is parsed once per process.
    """
    from core.thresholds import load_threshold_tables

    return load_threshold_tables(str(settings.healthtrack_thresholds_file))


def get_status_classifier() -> "StatusClassifier":
    from services.statistics import StatusClassifier

    return StatusClassifier(get_threshold_tables())


# =============================================================================
# REPOSITORY DEPENDENCIES
# =============================================================================

def get_user_repository() -> "UserRepository":
    """
    Get a UserRepository instance with database injected.

    Returns:
        UserRepository: Repository for users and doctor assignments.
    """
    from repositories import UserRepository

    return UserRepository(db=get_database())


def get_measurement_repository() -> "MeasurementRepository":
    """
    Get a MeasurementRepository instance with database injected.

    Returns:
        MeasurementRepository: Repository for measurements and their readings.
    """
    from repositories import MeasurementRepository

    return MeasurementRepository(db=get_database())


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_user_service() -> "UserService":
    """
    Get a UserService instance with repository injected.

    Returns:
        UserService: Service for user and patient assignment operations.
    """
    from services import UserService

    return UserService(user_repository=get_user_repository())


def get_measurement_service() -> "MeasurementService":
    """
    Get a MeasurementService instance with repositories and classifier injected.

    Returns:
        MeasurementService: Service for measurement operations.
    """
    from services import MeasurementService

    return MeasurementService(
        user_repository=get_user_repository(),
        measurement_repository=get_measurement_repository(),
        classifier=get_status_classifier(),
    )


def get_statistics_service() -> "StatisticsService":
    """
    Get a StatisticsService instance.

    Windows and day buckets are resolved in the configured display timezone.
    """
    from services import StatisticsService

    return StatisticsService(
        user_repository=get_user_repository(),
        measurement_repository=get_measurement_repository(),
        classifier=get_status_classifier(),
        display_timezone=settings.display_timezone,
    )


def get_export_service() -> "ExportService":
    from services import ExportService

    return ExportService(
        user_repository=get_user_repository(),
        measurement_repository=get_measurement_repository(),
        display_timezone=settings.display_timezone,
    )
