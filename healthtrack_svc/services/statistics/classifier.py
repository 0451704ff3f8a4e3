"""
Status classification of single measurements against the threshold tables.

Comparisons are strict: a value equal to a boundary stays in the milder band.
"""
import logging
from typing import Optional

from core.thresholds import ThresholdBand, ThresholdTables
from models.measurement import (
    BloodPressureReading,
    GlucoseReading,
    Measurement,
    Reading,
    StatusCategory,
)

logger = logging.getLogger(__name__)


def _above_very_high(value: Optional[int], band: ThresholdBand) -> bool:
    return bool(value) and band.very_high is not None and value > band.very_high


def _above_high(value: Optional[int], band: ThresholdBand) -> bool:
    return bool(value) and value > band.high


def _below_low(value: Optional[int], band: ThresholdBand) -> bool:
    return bool(value) and value < band.low


class StatusClassifier:
    """
    Maps a measurement to a StatusCategory.

    Glucose checks VERY_HIGH, then HIGH, then LOW. Blood pressure applies the
    same cascade with systolic OR diastolic triggering each level. Weight has
    no clinical status and is always NORMAL. A missing or zero reading is
    NORMAL.
    """

    def __init__(self, tables: ThresholdTables):
        self._tables = tables

    @property
    def tables(self) -> ThresholdTables:
        return self._tables

    def classify(self, measurement: Measurement) -> StatusCategory:
        return self.classify_reading(measurement.payload)

    def classify_reading(self, reading: Optional[Reading]) -> StatusCategory:
        if isinstance(reading, GlucoseReading):
            return self._classify_glucose(reading.value)
        if isinstance(reading, BloodPressureReading):
            return self._classify_blood_pressure(reading.systolic, reading.diastolic)
        return StatusCategory.NORMAL

    def _classify_glucose(self, value: Optional[int]) -> StatusCategory:
        band = self._tables.glucose
        if _above_very_high(value, band):
            return StatusCategory.VERY_HIGH
        if _above_high(value, band):
            return StatusCategory.HIGH
        if _below_low(value, band):
            return StatusCategory.LOW
        return StatusCategory.NORMAL

    def _classify_blood_pressure(self, systolic: Optional[int], diastolic: Optional[int]) -> StatusCategory:
        sys_band, dia_band = self._tables.systolic, self._tables.diastolic
        if _above_very_high(systolic, sys_band) or _above_very_high(diastolic, dia_band):
            return StatusCategory.VERY_HIGH
        if _above_high(systolic, sys_band) or _above_high(diastolic, dia_band):
            return StatusCategory.HIGH
        if _below_low(systolic, sys_band) or _below_low(diastolic, dia_band):
            return StatusCategory.LOW
        return StatusCategory.NORMAL
