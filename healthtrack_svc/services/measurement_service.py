"""
Service layer for measurement operations.

This service contains business logic for recording, listing, updating and
deleting measurements, and orchestrates calls to repositories.

Architecture:
    API Layer (routers) → MeasurementService → Repositories → Database

Dependency Injection:
    MeasurementService receives its repositories and the status classifier
    via constructor injection.
    Use core.dependencies.get_measurement_service() in routers with Depends().
"""
import logging
from datetime import datetime
from typing import List, Optional

from repositories import MeasurementRepository, UserRepository
from models.measurement import (
    BloodPressureReading,
    GlucoseReading,
    Measurement,
    MeasurementType,
    Reading,
    WeightReading,
)
from schemas import (
    BloodPressurePayload,
    GlucosePayload,
    LatestMeasurementsResponse,
    MeasurementResponse,
    MeasurementUpdate,
    WeightPayload,
)
from services.statistics import StatusClassifier, format_measurement, grams_to_kilograms
from core.datetime_utils import format_iso, to_utc, utc_now
from core.middleware import get_metrics_collector
from core.exceptions import (
    DatabaseError,
    InvalidMeasurementDataError,
    MeasurementNotFoundError,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)


_READING_FIELDS = {
    MeasurementType.GLUCOSE: {"value"},
    MeasurementType.BLOOD_PRESSURE: {"systolic", "diastolic", "heart_rate"},
    MeasurementType.WEIGHT: {"weight_kg"},
}


def build_measurement_response(measurement: Measurement, classifier: StatusClassifier) -> MeasurementResponse:
    """Convert a domain Measurement into its API response with status and display value."""
    glucose = measurement.glucose
    blood_pressure = measurement.blood_pressure
    weight = measurement.weight
    return MeasurementResponse(
        id=measurement.id,
        user_id=measurement.user_id,
        type=measurement.type,
        timestamp=format_iso(measurement.timestamp),
        notes=measurement.notes,
        glucose=GlucosePayload(value=glucose.value) if glucose else None,
        blood_pressure=BloodPressurePayload(
            systolic=blood_pressure.systolic,
            diastolic=blood_pressure.diastolic,
            heart_rate=blood_pressure.heart_rate,
        ) if blood_pressure else None,
        weight=WeightPayload(
            grams=weight.grams,
            kilograms=float(grams_to_kilograms(weight.grams)),
        ) if weight else None,
        status=classifier.classify(measurement),
        display_value=format_measurement(measurement),
    )


class MeasurementService:
    """
    Service layer for measurement operations.

    Verifies the owning user exists before writes and reads, and returns
    API responses enriched with the classified status.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        measurement_repository: MeasurementRepository,
        classifier: StatusClassifier,
    ):
        """
        Initialize the measurement service.

        Args:
            user_repository: UserRepository instance for owner lookups.
            measurement_repository: MeasurementRepository instance for measurement operations.
            classifier: StatusClassifier built from the loaded threshold tables.
                        All are injected via core.dependencies.get_measurement_service().
        """
        self._user_repo = user_repository
        self._measurement_repo = measurement_repository
        self._classifier = classifier

    def record(
        self,
        user_id: int,
        reading: Reading,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> MeasurementResponse:
        """
        Record a new measurement.

        Args:
            user_id: Owner of the measurement.
            reading: GlucoseReading, BloodPressureReading or WeightReading.
            timestamp: When it was taken (normalized to UTC, defaults to now).
            notes: Free-text notes (optional).

        Raises:
            UserNotFoundError: If the user doesn't exist.
            DatabaseError: If a database error occurs.
        """
        self._ensure_user(user_id)
        logger.info(f"Recording {reading.measurement_type.value} measurement for user {user_id}")

        utc_timestamp = to_utc(timestamp) if timestamp else utc_now()
        try:
            measurement = self._measurement_repo.save(
                user_id=user_id,
                reading=reading,
                timestamp=utc_timestamp,
                notes=notes,
            )
        except Exception as e:
            logger.error(f"Database error saving measurement: {e}", exc_info=True)
            raise DatabaseError(operation="save_measurement") from e

        response = build_measurement_response(measurement, self._classifier)
        get_metrics_collector().record_measurement(measurement.type.value, response.status.value)
        logger.info(
            f"Measurement saved (id={measurement.id}, status={response.status.value})"
        )
        return response

    def get_measurements(
        self,
        user_id: int,
        measurement_type: Optional[MeasurementType] = None,
        limit: Optional[int] = None,
    ) -> List[MeasurementResponse]:
        """Measurements of a user, newest first."""
        self._ensure_user(user_id)
        measurements = self._measurement_repo.get_all(
            user_id=user_id,
            measurement_type=measurement_type,
            limit=limit,
        )
        return [build_measurement_response(m, self._classifier) for m in measurements]

    def get_latest(self, user_id: int) -> LatestMeasurementsResponse:
        self._ensure_user(user_id)
        latest = self._measurement_repo.get_latest_by_type(user_id)
        return LatestMeasurementsResponse(**{
            measurement_type.value: build_measurement_response(m, self._classifier) if m else None
            for measurement_type, m in latest.items()
        })

    def get_measurement(self, measurement_id: int) -> MeasurementResponse:
        """
        Raises:
            MeasurementNotFoundError: If the measurement doesn't exist.
        """
        measurement = self._measurement_repo.get_by_id(measurement_id)
        if measurement is None:
            raise MeasurementNotFoundError(measurement_id=measurement_id)
        return build_measurement_response(measurement, self._classifier)

    def update_measurement(self, measurement_id: int, update: MeasurementUpdate) -> MeasurementResponse:
        """
        Apply a partial update.

        Reading fields must belong to the measurement's type. A blood
        pressure update may change a single channel; the other values are
        taken from the stored reading.

        Raises:
            MeasurementNotFoundError: If the measurement doesn't exist.
            InvalidMeasurementDataError: If fields don't fit the type, or a
                partial reading has nothing stored to complete it.
        """
        existing = self._measurement_repo.get_by_id(measurement_id)
        if existing is None:
            raise MeasurementNotFoundError(measurement_id=measurement_id)

        provided = update.model_fields_set
        reading_fields = provided - {"timestamp", "notes"}
        foreign = reading_fields - _READING_FIELDS[existing.type]
        if foreign:
            raise InvalidMeasurementDataError(
                detail=f"Fields not valid for a {existing.type.value} measurement: {', '.join(sorted(foreign))}",
                measurement_id=measurement_id,
            )

        reading = self._merge_reading(existing, update, reading_fields) if reading_fields else None

        changes = {}
        if "notes" in provided:
            changes["notes"] = update.notes
        if "timestamp" in provided and update.timestamp is not None:
            changes["timestamp"] = to_utc(update.timestamp)

        try:
            updated = self._measurement_repo.update(measurement_id, reading=reading, **changes)
        except Exception as e:
            logger.error(f"Database error updating measurement {measurement_id}: {e}", exc_info=True)
            raise DatabaseError(operation="update_measurement") from e

        if updated is None:
            raise MeasurementNotFoundError(measurement_id=measurement_id)
        logger.info(f"Measurement {measurement_id} updated ({', '.join(sorted(provided))})")
        return build_measurement_response(updated, self._classifier)

    def delete_measurement(self, measurement_id: int) -> None:
        """
        Raises:
            MeasurementNotFoundError: If the measurement doesn't exist.
        """
        try:
            deleted = self._measurement_repo.delete(measurement_id)
        except Exception as e:
            logger.error(f"Database error deleting measurement {measurement_id}: {e}", exc_info=True)
            raise DatabaseError(operation="delete_measurement") from e
        if not deleted:
            raise MeasurementNotFoundError(measurement_id=measurement_id)
        logger.info(f"Measurement {measurement_id} deleted")

    def _merge_reading(self, existing: Measurement, update: MeasurementUpdate, fields: set) -> Reading:
        required = fields - {"heart_rate"}
        if any(getattr(update, name) is None for name in required):
            raise InvalidMeasurementDataError(
                detail="Reading fields cannot be null",
                measurement_id=existing.id,
            )

        if existing.type is MeasurementType.GLUCOSE:
            return GlucoseReading(value=update.value)
        if existing.type is MeasurementType.WEIGHT:
            return WeightReading(grams=int(round(update.weight_kg * 1000)))

        current = existing.blood_pressure
        systolic = update.systolic if "systolic" in fields else (current.systolic if current else None)
        diastolic = update.diastolic if "diastolic" in fields else (current.diastolic if current else None)
        heart_rate = update.heart_rate if "heart_rate" in fields else (current.heart_rate if current else None)
        if systolic is None or diastolic is None:
            raise InvalidMeasurementDataError(
                detail="Blood pressure needs both systolic and diastolic values",
                measurement_id=existing.id,
            )
        return BloodPressureReading(systolic=systolic, diastolic=diastolic, heart_rate=heart_rate)

    def _ensure_user(self, user_id: int) -> None:
        if not self._user_repo.exists(user_id):
            logger.warning(f"User not found: {user_id}")
            raise UserNotFoundError(user_id=user_id)
