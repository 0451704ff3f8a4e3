"""
Repository for measurement database operations.

A measurement is stored as a base row in `measurements` plus one payload row
in the table matching its type. Writes touch both inside one transaction so
a reader never sees a base row whose payload is half-written.

Architecture:
    MeasurementRepository is the data access layer for measurements.
    It should be injected via core.dependencies.get_measurement_repository().

All SQL is encapsulated in this repository - no SQL in service or API layers.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from repositories.base import Database
from models.measurement import (
    BloodPressureReading,
    GlucoseReading,
    Measurement,
    MeasurementType,
    Reading,
    WeightReading,
)
from core.datetime_utils import format_iso, parse_datetime

logger = logging.getLogger(__name__)


_MEASUREMENT_SELECT = """
    SELECT m.id, m.user_id, m.type, m.timestamp, m.notes,
           g.value, bp.systolic, bp.diastolic, bp.heart_rate, w.value
    FROM measurements m
    LEFT JOIN glucose_measurements g ON g.measurement_id = m.id
    LEFT JOIN blood_pressure_measurements bp ON bp.measurement_id = m.id
    LEFT JOIN weight_measurements w ON w.measurement_id = m.id
"""

_ORDER_NEWEST_FIRST = " ORDER BY m.timestamp DESC, m.id DESC"

_PAYLOAD_TABLES = {
    MeasurementType.GLUCOSE: "glucose_measurements",
    MeasurementType.BLOOD_PRESSURE: "blood_pressure_measurements",
    MeasurementType.WEIGHT: "weight_measurements",
}

# Sentinel so update() can tell "leave notes alone" from "clear notes"
_UNSET = object()


def _row_to_measurement(row: tuple) -> Measurement:
    measurement_type = MeasurementType(row[2])

    payload: Optional[Reading] = None
    if measurement_type is MeasurementType.GLUCOSE and row[5] is not None:
        payload = GlucoseReading(value=row[5])
    elif measurement_type is MeasurementType.BLOOD_PRESSURE and row[6] is not None:
        payload = BloodPressureReading(systolic=row[6], diastolic=row[7], heart_rate=row[8])
    elif measurement_type is MeasurementType.WEIGHT and row[9] is not None:
        payload = WeightReading(grams=row[9])

    return Measurement(
        id=row[0],
        user_id=row[1],
        type=measurement_type,
        timestamp=parse_datetime(row[3]),
        payload=payload,
        notes=row[4],
    )


def _insert_payload(cursor, measurement_id: int, reading: Reading) -> None:
    if isinstance(reading, GlucoseReading):
        cursor.execute(
            "INSERT INTO glucose_measurements (measurement_id, value) VALUES (?, ?)",
            (measurement_id, reading.value)
        )
    elif isinstance(reading, BloodPressureReading):
        cursor.execute("""
            INSERT INTO blood_pressure_measurements
            (measurement_id, systolic, diastolic, heart_rate)
            VALUES (?, ?, ?, ?)
        """, (measurement_id, reading.systolic, reading.diastolic, reading.heart_rate))
    else:
        cursor.execute(
            "INSERT INTO weight_measurements (measurement_id, value) VALUES (?, ?)",
            (measurement_id, reading.grams)
        )


class MeasurementRepository:
    """
    Repository for measurement CRUD and window queries.

    Every list returned by this repository is ordered newest first
    (timestamp DESC, then id DESC for identical timestamps).
    """

    def __init__(self, db: Database):
        """
        Initialize the measurement repository.

        Args:
            db: Database instance for data access.
                Injected via core.dependencies.get_measurement_repository().
        """
        self._db = db

    def save(
        self,
        user_id: int,
        reading: Reading,
        timestamp: datetime,
        notes: Optional[str] = None,
    ) -> Measurement:
        """
        Save a measurement with its reading atomically (all or nothing).

        Args:
            user_id: Owner of the measurement.
            reading: Type-specific payload; its class decides the type.
            timestamp: When the measurement was taken.
            notes: Free-text notes (optional).

        Returns:
            Measurement: The stored measurement as read back in the same
                transaction.
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("BEGIN TRANSACTION")
            cursor.execute("""
                INSERT INTO measurements (user_id, type, timestamp, notes)
                VALUES (?, ?, ?, ?)
            """, (user_id, reading.measurement_type.value, format_iso(timestamp), notes))
            measurement_id = cursor.lastrowid

            _insert_payload(cursor, measurement_id, reading)

            cursor.execute(_MEASUREMENT_SELECT + " WHERE m.id = ?", (measurement_id,))
            row = cursor.fetchone()
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Error saving measurement: {str(e)}. Transaction rolled back.")
            raise
        finally:
            conn.close()

        return _row_to_measurement(row)

    def get_by_id(self, measurement_id: int) -> Optional[Measurement]:
        conn = self._db.get_connection()
        try:
            row = conn.execute(
                _MEASUREMENT_SELECT + " WHERE m.id = ?", (measurement_id,)
            ).fetchone()
        finally:
            conn.close()
        return _row_to_measurement(row) if row else None

    def get_all(
        self,
        user_id: int,
        measurement_type: Optional[MeasurementType] = None,
        limit: Optional[int] = None,
    ) -> List[Measurement]:
        """
        Retrieve a user's measurements, newest first.

        Args:
            user_id: Owner of the measurements.
            measurement_type: Filter by type (optional).
            limit: Maximum number of measurements to return (optional).
        """
        query = _MEASUREMENT_SELECT + " WHERE m.user_id = ?"
        params: list = [user_id]

        if measurement_type is not None:
            query += " AND m.type = ?"
            params.append(measurement_type.value)

        query += _ORDER_NEWEST_FIRST

        if limit:
            query += " LIMIT ?"
            params.append(limit)

        conn = self._db.get_connection()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()
        return [_row_to_measurement(row) for row in rows]

    def fetch_measurements(
        self,
        user_id: int,
        measurement_type: MeasurementType,
        window_start: datetime,
        window_end: datetime,
    ) -> List[Measurement]:
        """
        Measurements of one type inside a half-open time window.

        A measurement is included when window_start <= timestamp < window_end.
        Returns an empty list when nothing matches.
        """
        conn = self._db.get_connection()
        try:
            rows = conn.execute(
                _MEASUREMENT_SELECT
                + " WHERE m.user_id = ? AND m.type = ? AND m.timestamp >= ? AND m.timestamp < ?"
                + _ORDER_NEWEST_FIRST,
                (user_id, measurement_type.value, format_iso(window_start), format_iso(window_end))
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_measurement(row) for row in rows]

    def get_latest_by_type(self, user_id: int) -> Dict[MeasurementType, Optional[Measurement]]:
        """Most recent measurement of each type (None where the user has none)."""
        latest: Dict[MeasurementType, Optional[Measurement]] = {}
        conn = self._db.get_connection()
        try:
            for measurement_type in MeasurementType:
                row = conn.execute(
                    _MEASUREMENT_SELECT + " WHERE m.user_id = ? AND m.type = ?"
                    + _ORDER_NEWEST_FIRST + " LIMIT 1",
                    (user_id, measurement_type.value)
                ).fetchone()
                latest[measurement_type] = _row_to_measurement(row) if row else None
        finally:
            conn.close()
        return latest

    def update(
        self,
        measurement_id: int,
        reading: Optional[Reading] = None,
        timestamp: Optional[datetime] = None,
        notes=_UNSET,
    ) -> Optional[Measurement]:
        """
        Update a measurement's reading, timestamp and/or notes atomically.

        The reading, when given, must match the stored type; the payload row
        is replaced (or created if it was missing).

        Returns:
            Optional[Measurement]: The updated measurement, or None if it
                does not exist.
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("BEGIN TRANSACTION")
            cursor.execute("SELECT type FROM measurements WHERE id = ?", (measurement_id,))
            existing = cursor.fetchone()
            if existing is None:
                conn.rollback()
                return None

            stored_type = MeasurementType(existing[0])
            if reading is not None and reading.measurement_type is not stored_type:
                raise ValueError(
                    f"Cannot store a {reading.measurement_type.value} reading on a "
                    f"{stored_type.value} measurement"
                )

            if timestamp is not None:
                cursor.execute(
                    "UPDATE measurements SET timestamp = ? WHERE id = ?",
                    (format_iso(timestamp), measurement_id)
                )
            if notes is not _UNSET:
                cursor.execute(
                    "UPDATE measurements SET notes = ? WHERE id = ?",
                    (notes, measurement_id)
                )
            if reading is not None:
                cursor.execute(
                    f"DELETE FROM {_PAYLOAD_TABLES[stored_type]} WHERE measurement_id = ?",
                    (measurement_id,)
                )
                _insert_payload(cursor, measurement_id, reading)

            cursor.execute(_MEASUREMENT_SELECT + " WHERE m.id = ?", (measurement_id,))
            row = cursor.fetchone()
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Error updating measurement {measurement_id}: {str(e)}. Transaction rolled back.")
            raise
        finally:
            conn.close()

        return _row_to_measurement(row)

    def delete(self, measurement_id: int) -> bool:
        """
        Delete a measurement and its payload row.

        Returns:
            bool: True if a measurement was deleted.
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("BEGIN TRANSACTION")
            for table in _PAYLOAD_TABLES.values():
                cursor.execute(f"DELETE FROM {table} WHERE measurement_id = ?", (measurement_id,))
            cursor.execute("DELETE FROM measurements WHERE id = ?", (measurement_id,))
            deleted = cursor.rowcount > 0
            conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Error deleting measurement {measurement_id}: {str(e)}. Transaction rolled back.")
            raise
        finally:
            conn.close()

        return deleted
