"""
Tests for measurement status classification.
"""
import pytest

from models.measurement import (
    BloodPressureReading,
    GlucoseReading,
    MeasurementType,
    StatusCategory,
    WeightReading,
)


# =============================================================================
# GLUCOSE
# =============================================================================

@pytest.mark.parametrize("value,expected", [
    (69, StatusCategory.LOW),
    (70, StatusCategory.NORMAL),
    (100, StatusCategory.NORMAL),
    (140, StatusCategory.NORMAL),
    (141, StatusCategory.HIGH),
    (200, StatusCategory.HIGH),
    (201, StatusCategory.VERY_HIGH),
    (450, StatusCategory.VERY_HIGH),
])
def test_glucose_boundaries(classifier, value, expected):
    assert classifier.classify_reading(GlucoseReading(value=value)) is expected


def test_classify_uses_measurement_payload(classifier, make_measurement):
    assert classifier.classify(make_measurement(glucose=250)) is StatusCategory.VERY_HIGH


# =============================================================================
# BLOOD PRESSURE
# =============================================================================

@pytest.mark.parametrize("systolic,diastolic,expected", [
    (120, 80, StatusCategory.NORMAL),
    (140, 90, StatusCategory.NORMAL),
    (145, 85, StatusCategory.HIGH),
    (130, 95, StatusCategory.HIGH),
    (185, 85, StatusCategory.VERY_HIGH),
    (120, 125, StatusCategory.VERY_HIGH),
    (85, 70, StatusCategory.LOW),
    (110, 55, StatusCategory.LOW),
    (90, 60, StatusCategory.NORMAL),
])
def test_blood_pressure_or_combination(classifier, systolic, diastolic, expected):
    reading = BloodPressureReading(systolic=systolic, diastolic=diastolic)
    assert classifier.classify_reading(reading) is expected


def test_blood_pressure_higher_band_wins(classifier):
    # systolic low, diastolic very high
    reading = BloodPressureReading(systolic=85, diastolic=125)
    assert classifier.classify_reading(reading) is StatusCategory.VERY_HIGH


def test_heart_rate_does_not_affect_status(classifier):
    reading = BloodPressureReading(systolic=120, diastolic=80, heart_rate=180)
    assert classifier.classify_reading(reading) is StatusCategory.NORMAL


# =============================================================================
# WEIGHT & MISSING DATA
# =============================================================================

@pytest.mark.parametrize("grams", [1000, 78500, 300000])
def test_weight_is_always_normal(classifier, grams):
    assert classifier.classify_reading(WeightReading(grams=grams)) is StatusCategory.NORMAL


def test_missing_payload_is_normal(classifier, make_measurement):
    measurement = make_measurement(measurement_type=MeasurementType.GLUCOSE)
    assert measurement.payload is None
    assert classifier.classify(measurement) is StatusCategory.NORMAL


def test_zero_glucose_is_normal(classifier):
    assert classifier.classify_reading(GlucoseReading(value=0)) is StatusCategory.NORMAL


def test_zero_blood_pressure_is_normal(classifier):
    assert classifier.classify_reading(BloodPressureReading(systolic=0, diastolic=0)) is StatusCategory.NORMAL


def test_custom_tables_are_honoured(tables):
    from dataclasses import replace
    from services.statistics import StatusClassifier

    strict = replace(tables, glucose=replace(tables.glucose, high=100))
    assert StatusClassifier(strict).classify_reading(GlucoseReading(value=110)) is StatusCategory.HIGH
