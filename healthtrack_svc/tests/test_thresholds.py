"""
Tests for threshold table loading and validation.
"""
import pytest
import yaml

from core.thresholds import DEFAULT_THRESHOLDS_PATH, load_threshold_tables, parse_threshold_tables


def test_bundled_tables(tables):
    assert tables.glucose.low == 70
    assert tables.glucose.high == 140
    assert tables.glucose.very_high == 200
    assert tables.systolic.very_high == 180
    assert tables.diastolic.high == 90
    assert tables.heart_rate.very_high is None
    assert tables.bmi.obese == 30
    assert tables.glucose.normal_range == (70, 140)


def test_loader_is_cached():
    assert load_threshold_tables() is load_threshold_tables()


def test_to_dict_shape(tables):
    data = tables.to_dict()
    assert set(data) == {"glucose", "blood_pressure", "heart_rate", "bmi"}
    assert data["blood_pressure"]["systolic"]["unit"] == "mmHg"


def _config():
    with open(DEFAULT_THRESHOLDS_PATH, encoding="utf-8") as f:
        return yaml.safe_load(f)


def test_missing_field_is_rejected():
    config = _config()
    del config["glucose"]["high"]
    with pytest.raises(ValueError, match="high"):
        parse_threshold_tables(config)


def test_unordered_bounds_are_rejected():
    config = _config()
    config["blood_pressure"]["systolic"]["high"] = 100
    config["blood_pressure"]["systolic"]["normal_max"] = 130
    with pytest.raises(ValueError, match="non-decreasing"):
        parse_threshold_tables(config)


def test_non_numeric_value_is_rejected():
    config = _config()
    config["glucose"]["low"] = "seventy"
    with pytest.raises(ValueError, match="non-numeric"):
        parse_threshold_tables(config)


def test_alternate_file(tmp_path):
    config = _config()
    config["glucose"]["very_high"] = 250
    path = tmp_path / "thresholds.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")

    tables = load_threshold_tables(str(path))
    assert tables.glucose.very_high == 250


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_threshold_tables(str(tmp_path / "missing.yaml"))
