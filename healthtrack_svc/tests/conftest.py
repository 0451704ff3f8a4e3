"""
Shared pytest fixtures.

Key patterns:

1. Database Isolation: Each test gets a fresh temporary database
2. DI Override: app.dependency_overrides injects test services
3. Pure core: threshold tables and classifier come from the bundled YAML

Fixture Hierarchy:
    temp_db → repositories → services → test_app → client
"""
import os
import tempfile
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Set test configuration before importing config modules
TEST_API_KEY = "test-api-key-for-testing-purposes-12345678"
os.environ.setdefault("HEALTHTRACK_API_KEY", TEST_API_KEY)
os.environ.setdefault("HEALTHTRACK_DB_DIR", tempfile.mkdtemp(prefix="healthtrack-test-"))

from repositories.base import Database
from repositories import UserRepository, MeasurementRepository
from services import UserService, MeasurementService, StatisticsService, ExportService
from services.statistics import StatusClassifier
from models.measurement import (
    BloodPressureReading,
    GlucoseReading,
    Measurement,
    WeightReading,
)
from core.thresholds import load_threshold_tables
from core.exceptions import setup_exception_handlers
from core import dependencies as deps
from core.auth import verify_api_key


# =============================================================================
# PURE CORE FIXTURES
# =============================================================================

@pytest.fixture
def tables():
    return load_threshold_tables()


@pytest.fixture
def classifier(tables):
    return StatusClassifier(tables)


@pytest.fixture
def make_measurement():
    """
    Factory for in-memory measurements.

    Usage:
        make_measurement(glucose=120, at=datetime(...))
        make_measurement(systolic=130, diastolic=85)
        make_measurement(grams=78500)
    """
    counter = {"id": 0}

    def _make(at=None, glucose=None, systolic=None, diastolic=None, heart_rate=None,
              grams=None, measurement_type=None, user_id=1):
        counter["id"] += 1
        if glucose is not None:
            payload = GlucoseReading(value=glucose)
        elif systolic is not None or diastolic is not None:
            payload = BloodPressureReading(systolic=systolic, diastolic=diastolic, heart_rate=heart_rate)
        elif grams is not None:
            payload = WeightReading(grams=grams)
        else:
            payload = None
        return Measurement(
            id=counter["id"],
            user_id=user_id,
            type=measurement_type or payload.measurement_type,
            timestamp=at or datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc),
            payload=payload,
        )

    return _make


# =============================================================================
# DATABASE & LAYER FIXTURES
# =============================================================================

@pytest.fixture
def temp_db():
    """
    Create a temporary database for testing.

    Each test gets a fresh SQLite file, removed afterwards.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    db = Database(db_path=db_path)
    yield db

    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(db_path + suffix):
            os.unlink(db_path + suffix)


@pytest.fixture
def user_repo(temp_db):
    return UserRepository(db=temp_db)


@pytest.fixture
def measurement_repo(temp_db):
    return MeasurementRepository(db=temp_db)


@pytest.fixture
def user_service(user_repo):
    return UserService(user_repository=user_repo)


@pytest.fixture
def measurement_service(user_repo, measurement_repo, classifier):
    return MeasurementService(
        user_repository=user_repo,
        measurement_repository=measurement_repo,
        classifier=classifier,
    )


@pytest.fixture
def statistics_service(user_repo, measurement_repo, classifier):
    return StatisticsService(
        user_repository=user_repo,
        measurement_repository=measurement_repo,
        classifier=classifier,
        display_timezone=timezone.utc,
    )


@pytest.fixture
def export_service(user_repo, measurement_repo):
    return ExportService(
        user_repository=user_repo,
        measurement_repository=measurement_repo,
        display_timezone=timezone.utc,
    )


@pytest.fixture
def patient(user_repo):
    """A 'user'-role account that owns measurements."""
    return user_repo.add(username="mrossi", name="Mario Rossi")


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture
def test_app(temp_db, tables, user_repo, measurement_repo, user_service,
             measurement_service, statistics_service, export_service):
    """
    FastAPI app with the real routers and test dependencies.

    Auth is skipped; test_auth.py exercises it separately.
    """
    from api.routers import (
        health_router,
        users_router,
        measurements_router,
        statistics_router,
        export_router,
        meta_router,
    )

    app = FastAPI(title="HealthTrack API Test")
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_database] = lambda: temp_db
    app.dependency_overrides[deps.get_threshold_tables] = lambda: tables
    app.dependency_overrides[deps.get_user_repository] = lambda: user_repo
    app.dependency_overrides[deps.get_measurement_repository] = lambda: measurement_repo
    app.dependency_overrides[deps.get_user_service] = lambda: user_service
    app.dependency_overrides[deps.get_measurement_service] = lambda: measurement_service
    app.dependency_overrides[deps.get_statistics_service] = lambda: statistics_service
    app.dependency_overrides[deps.get_export_service] = lambda: export_service

    async def skip_auth():
        return TEST_API_KEY
    app.dependency_overrides[verify_api_key] = skip_auth

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(measurements_router)
    app.include_router(statistics_router)
    app.include_router(export_router)
    app.include_router(meta_router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)


@pytest.fixture
def patient_id(client):
    """Create a patient through the API and return its id."""
    response = client.post(
        "/api/v1/users",
        json={"username": "apatient", "name": "Anna Patient"}
    )
    assert response.status_code == 201
    return response.json()["id"]
