"""
Tests for display formatting.
"""
from models.measurement import MeasurementType
from services.statistics import (
    NOT_AVAILABLE,
    aggregate,
    format_blood_pressure,
    format_glucose,
    format_measurement,
    format_statistics,
    format_weight,
)


def test_weight_converted_at_formatting_time():
    assert format_weight(78500) == "78.5 kg"
    assert format_weight(80000) == "80.0 kg"
    assert format_weight(78550) == "78.6 kg"


def test_glucose_rounds_half_up():
    assert format_glucose(120) == "120 mg/dL"
    assert format_glucose(120.5) == "121 mg/dL"
    assert format_glucose(120.4) == "120 mg/dL"


def test_blood_pressure_with_and_without_heart_rate():
    assert format_blood_pressure(120, 80) == "120/80 mmHg"
    assert format_blood_pressure(120, 80, 72) == "120/80 mmHg, 72 BPM"


def test_unavailable_values():
    assert format_glucose(None) == NOT_AVAILABLE
    assert format_weight(None) == NOT_AVAILABLE
    assert format_blood_pressure(None, 80) == NOT_AVAILABLE


def test_format_measurement(make_measurement):
    assert format_measurement(make_measurement(grams=72300)) == "72.3 kg"
    assert format_measurement(make_measurement(measurement_type=MeasurementType.WEIGHT)) == NOT_AVAILABLE


def test_format_statistics_weight(make_measurement):
    stats = aggregate([make_measurement(grams=78000), make_measurement(grams=79000)], MeasurementType.WEIGHT)
    assert format_statistics(stats) == {
        "average": "78.5 kg",
        "minimum": "78.0 kg",
        "maximum": "79.0 kg",
    }


def test_format_statistics_blood_pressure(make_measurement):
    stats = aggregate(
        [make_measurement(systolic=120, diastolic=80), make_measurement(systolic=131, diastolic=85)],
        MeasurementType.BLOOD_PRESSURE,
    )
    formatted = format_statistics(stats)
    assert formatted["average"] == "126/83 mmHg"
    assert formatted["maximum"] == "131/85 mmHg"


def test_format_statistics_empty():
    formatted = format_statistics(aggregate([], MeasurementType.GLUCOSE))
    assert formatted == {"average": "N/A", "minimum": "N/A", "maximum": "N/A"}
