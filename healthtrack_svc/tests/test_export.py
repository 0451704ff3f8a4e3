"""
Tests for CSV export.
"""
from datetime import datetime, timezone

from models.measurement import BloodPressureReading, GlucoseReading, MeasurementType, WeightReading


def at(day, hour=8):
    return datetime(2025, 1, day, hour, 0, tzinfo=timezone.utc)


def test_export_service_rows_newest_first(export_service, measurement_repo, patient):
    measurement_repo.save(patient.id, GlucoseReading(value=95), at(10), notes="fasting")
    measurement_repo.save(patient.id, BloodPressureReading(120, 80, 70), at(11, 9))
    measurement_repo.save(patient.id, WeightReading(grams=78500), at(12))

    lines = export_service.export_csv(patient.id).splitlines()

    assert lines[0] == '"Date","Type","Value","Notes"'
    assert lines[1] == '"12/01/2025 08:00","Weight","78.5 kg",""'
    assert lines[2] == '"11/01/2025 09:00","Blood pressure","120/80 mmHg, 70 BPM",""'
    assert lines[3] == '"10/01/2025 08:00","Glucose","95 mg/dL","fasting"'


def test_export_service_quotes_embedded_characters(export_service, measurement_repo, patient):
    measurement_repo.save(patient.id, GlucoseReading(value=110), at(10), notes='said "ok", then left')
    lines = export_service.export_csv(patient.id).splitlines()
    assert lines[1].endswith('"said ""ok"", then left"')


def test_export_service_filters_by_type(export_service, measurement_repo, patient):
    measurement_repo.save(patient.id, GlucoseReading(value=95), at(10))
    measurement_repo.save(patient.id, WeightReading(grams=70000), at(11))
    lines = export_service.export_csv(patient.id, MeasurementType.WEIGHT).splitlines()
    assert len(lines) == 2
    assert '"Weight"' in lines[1]


def test_export_empty_has_header_only(export_service, patient):
    assert export_service.export_csv(patient.id) == '"Date","Type","Value","Notes"\n'


def test_export_endpoint(client, patient_id):
    client.post(
        "/api/v1/measurements/glucose",
        json={"user_id": patient_id, "value": 180, "timestamp": "2025-01-15T08:00:00Z"}
    )

    response = client.get("/api/v1/export/measurements", params={"user_id": patient_id})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == "attachment; filename=measurements.csv"
    assert response.text.splitlines()[1] == '"15/01/2025 08:00","Glucose","180 mg/dL",""'


def test_export_unknown_user(client):
    assert client.get("/api/v1/export/measurements", params={"user_id": 999}).status_code == 404
