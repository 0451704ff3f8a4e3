"""
Tests for the statistics service and endpoints.
"""
from datetime import date, datetime, timedelta, timezone

from core.datetime_utils import format_iso, utc_now
from models.measurement import BloodPressureReading, GlucoseReading, MeasurementType, WeightReading


REFERENCE = date(2025, 1, 15)


def at(day, hour=8):
    return datetime(2025, 1, day, hour, 0, tzinfo=timezone.utc)


# =============================================================================
# SERVICE (fixed reference date)
# =============================================================================

def test_summary_with_trend(statistics_service, measurement_repo, patient):
    # current window: 9th-15th, previous window: 2nd-8th
    for day, value in ((15, 120), (13, 100)):
        measurement_repo.save(patient.id, GlucoseReading(value=value), at(day))
    for day, value in ((8, 100), (2, 100)):
        measurement_repo.save(patient.id, GlucoseReading(value=value), at(day))
    measurement_repo.save(patient.id, GlucoseReading(value=300), at(1))  # outside both

    summary = statistics_service.get_summary(patient.id, MeasurementType.GLUCOSE, days=7, reference_date=REFERENCE)

    assert summary.current.count == 2
    assert summary.current.average == 110
    assert summary.current.formatted["average"] == "110 mg/dL"
    assert summary.current.start == "2025-01-09T00:00:00Z"
    assert summary.current.end == "2025-01-16T00:00:00Z"
    assert summary.previous.count == 2
    assert summary.previous.end == summary.current.start
    assert summary.trend.percentage == 10.0
    assert summary.trend.increased is True
    assert summary.unit == "mg/dL"

    assert len(summary.buckets) == 7
    assert summary.buckets[-1].label == "15/01"
    assert summary.buckets[-1].values == {"value": 120}
    assert summary.buckets[-2].values is None


def test_summary_without_previous_data(statistics_service, measurement_repo, patient):
    measurement_repo.save(patient.id, GlucoseReading(value=120), at(15))
    summary = statistics_service.get_summary(patient.id, MeasurementType.GLUCOSE, days=7, reference_date=REFERENCE)
    assert summary.trend is None
    assert summary.previous.count == 0
    assert summary.previous.average is None
    assert summary.previous.formatted["average"] == "N/A"


def test_summary_empty(statistics_service, patient):
    summary = statistics_service.get_summary(patient.id, MeasurementType.WEIGHT, days=30, reference_date=REFERENCE)
    assert summary.current.count == 0
    assert summary.trend is None
    assert len(summary.buckets) == 30
    assert all(b.values is None for b in summary.buckets)


def test_weight_summary_formats_kilograms(statistics_service, measurement_repo, patient):
    measurement_repo.save(patient.id, WeightReading(grams=78000), at(14))
    measurement_repo.save(patient.id, WeightReading(grams=79000), at(15))
    summary = statistics_service.get_summary(patient.id, MeasurementType.WEIGHT, days=7, reference_date=REFERENCE)
    assert summary.current.average == 78500
    assert summary.current.formatted["average"] == "78.5 kg"
    assert summary.buckets[-1].values == {"value": 79.0}


def test_blood_pressure_summary_channels(statistics_service, measurement_repo, patient):
    measurement_repo.save(patient.id, BloodPressureReading(130, 85, 70), at(15))
    measurement_repo.save(patient.id, BloodPressureReading(120, 75), at(14))
    measurement_repo.save(patient.id, BloodPressureReading(100, 90), at(5))

    summary = statistics_service.get_summary(
        patient.id, MeasurementType.BLOOD_PRESSURE, days=7, reference_date=REFERENCE
    )
    assert summary.current.average == 125
    assert summary.current.channels["diastolic"].average == 80
    assert summary.current.channels["heart_rate"].count == 1
    assert summary.current.formatted["average"] == "125/80 mmHg"
    assert summary.trend.percentage == 25.0


def test_window_measurements_have_status(statistics_service, measurement_repo, patient):
    measurement_repo.save(patient.id, GlucoseReading(value=250), at(15))
    measurement_repo.save(patient.id, GlucoseReading(value=60), at(14))
    rows = statistics_service.get_window_measurements(
        patient.id, MeasurementType.GLUCOSE, days=7, reference_date=REFERENCE
    )
    assert [(r.glucose.value, r.status.value) for r in rows] == [(250, "very_high"), (60, "low")]


# =============================================================================
# API (windows end today)
# =============================================================================

def _glucose(client, user_id, value, days_ago):
    timestamp = format_iso(utc_now() - timedelta(days=days_ago))
    response = client.post(
        "/api/v1/measurements/glucose",
        json={"user_id": user_id, "value": value, "timestamp": timestamp}
    )
    assert response.status_code == 201


def test_statistics_endpoint(client, patient_id):
    _glucose(client, patient_id, 90, days_ago=0)
    _glucose(client, patient_id, 110, days_ago=3)
    _glucose(client, patient_id, 80, days_ago=8)

    response = client.get("/api/v1/statistics/glucose", params={"user_id": patient_id})
    assert response.status_code == 200
    data = response.json()
    assert data["days"] == 7
    assert data["current"]["count"] == 2
    assert data["current"]["average"] == 100
    assert data["previous"]["count"] == 1
    assert data["trend"] == {"percentage": 25.0, "increased": True, "arrow": "↑"}
    assert len(data["buckets"]) == 7
    assert data["buckets"][-1]["values"] == {"value": 90}


def test_statistics_custom_days(client, patient_id):
    _glucose(client, patient_id, 100, days_ago=20)
    data = client.get("/api/v1/statistics/glucose", params={"user_id": patient_id, "days": 30}).json()
    assert data["current"]["count"] == 1
    assert len(data["buckets"]) == 30


def test_statistics_validation(client, patient_id):
    assert client.get("/api/v1/statistics/cholesterol", params={"user_id": patient_id}).status_code == 422
    assert client.get("/api/v1/statistics/glucose", params={"user_id": patient_id, "days": 0}).status_code == 422
    assert client.get("/api/v1/statistics/glucose").status_code == 422


def test_statistics_unknown_user(client):
    assert client.get("/api/v1/statistics/weight", params={"user_id": 999}).status_code == 404


def test_window_measurements_endpoint(client, patient_id):
    _glucose(client, patient_id, 150, days_ago=1)
    _glucose(client, patient_id, 100, days_ago=10)
    response = client.get("/api/v1/statistics/glucose/measurements", params={"user_id": patient_id})
    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["status"] == "high"
