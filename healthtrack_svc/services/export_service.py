"""
Service layer for exporting measurements as CSV.
"""
import csv
import io
import logging
from datetime import tzinfo
from typing import Optional

from repositories import MeasurementRepository, UserRepository
from models.measurement import MeasurementType
from services.statistics import format_measurement
from core.datetime_utils import format_for_display
from core.exceptions import UserNotFoundError

logger = logging.getLogger(__name__)

CSV_HEADER = ("Date", "Type", "Value", "Notes")
CSV_FILENAME = "measurements.csv"

TYPE_LABELS = {
    MeasurementType.GLUCOSE: "Glucose",
    MeasurementType.BLOOD_PRESSURE: "Blood pressure",
    MeasurementType.WEIGHT: "Weight",
}


class ExportService:
    """Renders a user's measurements, newest first, as a fully-quoted CSV document."""

    def __init__(
        self,
        user_repository: UserRepository,
        measurement_repository: MeasurementRepository,
        display_timezone: tzinfo,
    ):
        self._user_repo = user_repository
        self._measurement_repo = measurement_repository
        self._tz = display_timezone

    def export_csv(self, user_id: int, measurement_type: Optional[MeasurementType] = None) -> str:
        """
        Raises:
            UserNotFoundError: If the user doesn't exist.
        """
        if not self._user_repo.exists(user_id):
            raise UserNotFoundError(user_id=user_id)

        measurements = self._measurement_repo.get_all(
            user_id=user_id,
            measurement_type=measurement_type,
        )

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for m in measurements:
            writer.writerow((
                format_for_display(m.timestamp, self._tz),
                TYPE_LABELS[m.type],
                format_measurement(m),
                m.notes or "",
            ))

        logger.info(f"Exported {len(measurements)} measurements for user {user_id}")
        return buffer.getvalue()
