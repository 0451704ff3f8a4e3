"""
Display formatting for readings and statistics.

Rounding is half-up, so 120.5 mg/dL displays as 121 and 78550 g as 78.6 kg.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import TYPE_CHECKING, Dict, Optional

from models.measurement import (
    BloodPressureReading,
    GlucoseReading,
    Measurement,
    MeasurementType,
    Reading,
    WeightReading,
)

if TYPE_CHECKING:
    from services.statistics.aggregator import SeriesStatistics

NOT_AVAILABLE = "N/A"

UNITS = {
    MeasurementType.GLUCOSE: "mg/dL",
    MeasurementType.BLOOD_PRESSURE: "mmHg",
    MeasurementType.WEIGHT: "kg",
}


def _half_up(value: float, places: int = 0) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)


def format_glucose(value: Optional[float]) -> str:
    if value is None:
        return NOT_AVAILABLE
    return f"{_half_up(value)} mg/dL"


def format_blood_pressure(
    systolic: Optional[float],
    diastolic: Optional[float],
    heart_rate: Optional[float] = None,
) -> str:
    if systolic is None or diastolic is None:
        return NOT_AVAILABLE
    text = f"{_half_up(systolic)}/{_half_up(diastolic)} mmHg"
    if heart_rate:
        text += f", {_half_up(heart_rate)} BPM"
    return text


def grams_to_kilograms(grams: float) -> Decimal:
    """Kilograms rounded half-up to one decimal, shared by cards, charts and payloads."""
    return _half_up(Decimal(str(grams)) / 1000, 1)


def format_weight(grams: Optional[float]) -> str:
    """Grams to kilograms with exactly one decimal: 78500 -> '78.5 kg'."""
    if grams is None:
        return NOT_AVAILABLE
    return f"{grams_to_kilograms(grams)} kg"


def format_reading(reading: Optional[Reading]) -> str:
    if isinstance(reading, GlucoseReading):
        return format_glucose(reading.value)
    if isinstance(reading, BloodPressureReading):
        return format_blood_pressure(reading.systolic, reading.diastolic, reading.heart_rate)
    if isinstance(reading, WeightReading):
        return format_weight(reading.grams)
    return NOT_AVAILABLE


def format_measurement(measurement: Measurement) -> str:
    return format_reading(measurement.payload)


def format_statistics(stats: "SeriesStatistics") -> Dict[str, str]:
    """
    Formatted average / minimum / maximum of a series.

    Blood pressure shows systolic/diastolic pairs, each channel computed on
    its own; unavailable values render as 'N/A'.
    """
    if stats.measurement_type is MeasurementType.BLOOD_PRESSURE:
        sys_stats = stats.channels["systolic"]
        dia_stats = stats.channels["diastolic"]
        return {
            "average": format_blood_pressure(sys_stats.average, dia_stats.average),
            "minimum": format_blood_pressure(sys_stats.minimum, dia_stats.minimum),
            "maximum": format_blood_pressure(sys_stats.maximum, dia_stats.maximum),
        }

    formatter = format_glucose if stats.measurement_type is MeasurementType.GLUCOSE else format_weight
    return {
        "average": formatter(stats.average),
        "minimum": formatter(stats.minimum),
        "maximum": formatter(stats.maximum),
    }
