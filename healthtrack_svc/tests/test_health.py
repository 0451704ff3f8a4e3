"""
Tests for health, readiness, metrics and metadata endpoints.
"""


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "1.0.0"
    assert data["timestamp"].endswith("Z")


def test_readiness_check(client):
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert {d["name"] for d in data["dependencies"]} == {"database", "thresholds"}
    assert all(d["status"] == "ok" for d in data["dependencies"])


def test_root(client):
    data = client.get("/").json()
    assert data["service"] == "HealthTrack API"
    assert data["docs"] == "/docs"


def test_metrics_count_recorded_measurements(client, patient_id):
    before = client.get("/metrics/json").json()["measurements_recorded_total"]

    client.post("/api/v1/measurements/glucose", json={"user_id": patient_id, "value": 250})

    data = client.get("/metrics/json").json()
    assert data["measurements_recorded_total"] == before + 1

    text = client.get("/metrics").text
    assert 'measurements_recorded_total{type="glucose",status="very_high"}' in text
    assert "http_requests_total" in text


def test_threshold_tables(client):
    response = client.get("/api/v1/meta/thresholds")
    assert response.status_code == 200
    data = response.json()
    assert data["glucose"]["unit"] == "mg/dL"
    assert data["glucose"]["very_high"] == 200
    assert data["blood_pressure"]["systolic"]["high"] == 140
    assert data["blood_pressure"]["diastolic"]["very_high"] == 120
    assert "bmi" in data
