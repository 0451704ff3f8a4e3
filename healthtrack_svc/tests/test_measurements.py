"""
Tests for measurement endpoints.
"""
import pytest


# =============================================================================
# CREATE
# =============================================================================

def test_record_glucose(client, patient_id):
    response = client.post(
        "/api/v1/measurements/glucose",
        json={
            "user_id": patient_id,
            "value": 150,
            "timestamp": "2025-01-15T08:00:00Z",
            "notes": "after breakfast",
        }
    )
    assert response.status_code == 201
    data = response.json()
    assert data["type"] == "glucose"
    assert data["glucose"] == {"value": 150}
    assert data["blood_pressure"] is None
    assert data["status"] == "high"
    assert data["display_value"] == "150 mg/dL"
    assert data["timestamp"] == "2025-01-15T08:00:00Z"
    assert data["notes"] == "after breakfast"


def test_record_glucose_defaults_timestamp_to_now(client, patient_id):
    response = client.post("/api/v1/measurements/glucose", json={"user_id": patient_id, "value": 90})
    assert response.status_code == 201
    assert response.json()["timestamp"].endswith("Z")
    assert response.json()["status"] == "normal"


def test_record_blood_pressure(client, patient_id):
    response = client.post(
        "/api/v1/measurements/blood-pressure",
        json={"user_id": patient_id, "systolic": 185, "diastolic": 95, "heart_rate": 72}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["blood_pressure"] == {"systolic": 185, "diastolic": 95, "heart_rate": 72}
    assert data["status"] == "very_high"
    assert data["display_value"] == "185/95 mmHg, 72 BPM"


def test_record_weight(client, patient_id):
    response = client.post(
        "/api/v1/measurements/weight",
        json={"user_id": patient_id, "weight_kg": 78.5}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["weight"] == {"grams": 78500, "kilograms": 78.5}
    assert data["status"] == "normal"
    assert data["display_value"] == "78.5 kg"


def test_weight_payload_rounds_like_display_value(client, patient_id):
    response = client.post(
        "/api/v1/measurements/weight",
        json={"user_id": patient_id, "weight_kg": 78.55}
    )
    data = response.json()
    assert data["weight"] == {"grams": 78550, "kilograms": 78.6}
    assert data["display_value"] == "78.6 kg"


@pytest.mark.parametrize("path,body", [
    ("glucose", {"value": 10}),
    ("glucose", {"value": 700}),
    ("blood-pressure", {"systolic": 60, "diastolic": 80}),
    ("blood-pressure", {"systolic": 120, "diastolic": 160}),
    ("blood-pressure", {"systolic": 120, "diastolic": 80, "heart_rate": 250}),
    ("weight", {"weight_kg": 0.5}),
    ("weight", {"weight_kg": 301}),
])
def test_out_of_range_values_rejected(client, patient_id, path, body):
    response = client.post(f"/api/v1/measurements/{path}", json={"user_id": patient_id, **body})
    assert response.status_code == 422


def test_record_for_unknown_user(client):
    response = client.post("/api/v1/measurements/glucose", json={"user_id": 999, "value": 100})
    assert response.status_code == 404


# =============================================================================
# READ
# =============================================================================

def test_list_newest_first_with_filters(client, patient_id):
    for day, value in ((10, 100), (12, 110), (11, 120)):
        client.post(
            "/api/v1/measurements/glucose",
            json={"user_id": patient_id, "value": value, "timestamp": f"2025-01-{day}T08:00:00Z"}
        )
    client.post(
        "/api/v1/measurements/weight",
        json={"user_id": patient_id, "weight_kg": 80, "timestamp": "2025-01-13T08:00:00Z"}
    )

    all_measurements = client.get("/api/v1/measurements", params={"user_id": patient_id}).json()
    assert [m["type"] for m in all_measurements][0] == "weight"
    assert len(all_measurements) == 4

    glucose = client.get(
        "/api/v1/measurements",
        params={"user_id": patient_id, "type": "glucose", "limit": 2}
    ).json()
    assert [m["glucose"]["value"] for m in glucose] == [110, 120]


def test_latest_per_type(client, patient_id):
    client.post("/api/v1/measurements/glucose",
                json={"user_id": patient_id, "value": 100, "timestamp": "2025-01-10T08:00:00Z"})
    client.post("/api/v1/measurements/glucose",
                json={"user_id": patient_id, "value": 130, "timestamp": "2025-01-11T08:00:00Z"})

    response = client.get("/api/v1/measurements/latest", params={"user_id": patient_id})
    assert response.status_code == 200
    data = response.json()
    assert data["glucose"]["glucose"]["value"] == 130
    assert data["blood_pressure"] is None
    assert data["weight"] is None


def test_get_measurement_not_found(client):
    response = client.get("/api/v1/measurements/12345")
    assert response.status_code == 404
    assert response.json()["context"]["measurement_id"] == 12345


# =============================================================================
# UPDATE / DELETE
# =============================================================================

def _bp(client, patient_id):
    return client.post(
        "/api/v1/measurements/blood-pressure",
        json={"user_id": patient_id, "systolic": 120, "diastolic": 80, "heart_rate": 70}
    ).json()


def test_patch_single_channel_keeps_others(client, patient_id):
    created = _bp(client, patient_id)
    response = client.patch(f"/api/v1/measurements/{created['id']}", json={"systolic": 150})
    assert response.status_code == 200
    data = response.json()
    assert data["blood_pressure"] == {"systolic": 150, "diastolic": 80, "heart_rate": 70}
    assert data["status"] == "high"


def test_patch_notes_and_timestamp(client, patient_id):
    created = _bp(client, patient_id)
    response = client.patch(
        f"/api/v1/measurements/{created['id']}",
        json={"notes": "rechecked", "timestamp": "2025-02-01T09:30:00+01:00"}
    )
    data = response.json()
    assert data["notes"] == "rechecked"
    assert data["timestamp"] == "2025-02-01T08:30:00Z"


def test_patch_rejects_fields_of_other_type(client, patient_id):
    created = _bp(client, patient_id)
    response = client.patch(f"/api/v1/measurements/{created['id']}", json={"weight_kg": 70})
    assert response.status_code == 400
    assert "weight_kg" in response.json()["detail"]


def test_patch_empty_body(client, patient_id):
    created = _bp(client, patient_id)
    assert client.patch(f"/api/v1/measurements/{created['id']}", json={}).status_code == 422


def test_patch_unknown_measurement(client):
    assert client.patch("/api/v1/measurements/999", json={"notes": "x"}).status_code == 404


def test_delete(client, patient_id):
    created = _bp(client, patient_id)
    response = client.delete(f"/api/v1/measurements/{created['id']}")
    assert response.status_code == 204
    assert client.get(f"/api/v1/measurements/{created['id']}").status_code == 404
    assert client.delete(f"/api/v1/measurements/{created['id']}").status_code == 404
