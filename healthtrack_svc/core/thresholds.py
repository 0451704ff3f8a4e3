"""
Clinical threshold tables - single source of truth for status bands.

This module provides:
- YAML-based loading and validation of thresholds.yaml
- Immutable dataclasses for each table
- A cached loader so the file is read once per process

The loaded ThresholdTables object is injected into the classifier and the
statistics service (see core.dependencies.get_threshold_tables), which lets
tests construct alternate tables without touching module state.

Usage:
    from core.thresholds import load_threshold_tables

    tables = load_threshold_tables()
    tables.glucose.very_high  # 200.0
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS_PATH = Path(__file__).parent / "thresholds.yaml"


# =============================================================================
# TABLE DATACLASSES
# =============================================================================

@dataclass(frozen=True)
class ThresholdBand:
    """
    Boundaries of one measured channel.

    Attributes:
        unit: Display unit (e.g. "mg/dL", "mmHg")
        low: Values strictly below this are LOW
        normal_min: Lower edge of the normal band
        normal_max: Upper edge of the normal band
        high: Values strictly above this are HIGH
        very_high: Values strictly above this are VERY_HIGH, None if the
            channel has no such band
    """
    unit: str
    low: float
    normal_min: float
    normal_max: float
    high: float
    very_high: Optional[float] = None

    @property
    def normal_range(self):
        """(normal_min, normal_max) tuple, handy for chart reference lines."""
        return (self.normal_min, self.normal_max)


@dataclass(frozen=True)
class BmiCategories:
    """Body-mass-index category boundaries (informational)."""
    underweight: float
    normal_min: float
    normal_max: float
    overweight: float
    obese: float


@dataclass(frozen=True)
class ThresholdTables:
    """All threshold tables, loaded once and shared read-only."""
    glucose: ThresholdBand
    systolic: ThresholdBand
    diastolic: ThresholdBand
    heart_rate: ThresholdBand
    bmi: BmiCategories

    def to_dict(self) -> Dict[str, Any]:
        """Plain-dict view for API responses."""
        def band(b: ThresholdBand) -> Dict[str, Any]:
            return {
                "unit": b.unit,
                "low": b.low,
                "normal_min": b.normal_min,
                "normal_max": b.normal_max,
                "high": b.high,
                "very_high": b.very_high,
            }

        return {
            "glucose": band(self.glucose),
            "blood_pressure": {
                "systolic": band(self.systolic),
                "diastolic": band(self.diastolic),
            },
            "heart_rate": band(self.heart_rate),
            "bmi": {
                "underweight": self.bmi.underweight,
                "normal_min": self.bmi.normal_min,
                "normal_max": self.bmi.normal_max,
                "overweight": self.bmi.overweight,
                "obese": self.bmi.obese,
            },
        }


# =============================================================================
# YAML LOADING & VALIDATION
# =============================================================================

_BAND_FIELDS = ("low", "normal_min", "normal_max", "high")


def _number(raw: Dict[str, Any], key: str, table: str) -> float:
    if key not in raw:
        raise ValueError(f"Threshold table '{table}' is missing required field: '{key}'")
    try:
        return float(raw[key])
    except (TypeError, ValueError):
        raise ValueError(f"Threshold table '{table}' has non-numeric value for '{key}': {raw[key]!r}")


def _parse_band(raw: Any, table: str) -> ThresholdBand:
    """Validate and parse one threshold band."""
    if not isinstance(raw, dict):
        raise ValueError(f"Threshold table '{table}' must be a mapping")

    low, normal_min, normal_max, high = (_number(raw, key, table) for key in _BAND_FIELDS)
    very_high = _number(raw, "very_high", table) if raw.get("very_high") is not None else None

    ordered = [low, normal_min, normal_max, high] + ([very_high] if very_high is not None else [])
    if any(a > b for a, b in zip(ordered, ordered[1:])):
        raise ValueError(
            f"Threshold table '{table}' boundaries must be non-decreasing "
            f"(low <= normal_min <= normal_max <= high <= very_high)"
        )

    return ThresholdBand(
        unit=str(raw.get("unit", "")),
        low=low,
        normal_min=normal_min,
        normal_max=normal_max,
        high=high,
        very_high=very_high,
    )


def _parse_bmi(raw: Any) -> BmiCategories:
    if not isinstance(raw, dict):
        raise ValueError("Threshold table 'bmi' must be a mapping")
    return BmiCategories(
        underweight=_number(raw, "underweight", "bmi"),
        normal_min=_number(raw, "normal_min", "bmi"),
        normal_max=_number(raw, "normal_max", "bmi"),
        overweight=_number(raw, "overweight", "bmi"),
        obese=_number(raw, "obese", "bmi"),
    )


def parse_threshold_tables(config: Dict[str, Any]) -> ThresholdTables:
    """
    Build ThresholdTables from an already-parsed YAML mapping.

    Raises:
        ValueError: If a table is missing, non-numeric or out of order
    """
    if not isinstance(config, dict):
        raise ValueError("Threshold configuration must be a mapping")

    blood_pressure = config.get("blood_pressure") or {}
    return ThresholdTables(
        glucose=_parse_band(config.get("glucose"), "glucose"),
        systolic=_parse_band(blood_pressure.get("systolic"), "blood_pressure.systolic"),
        diastolic=_parse_band(blood_pressure.get("diastolic"), "blood_pressure.diastolic"),
        heart_rate=_parse_band(config.get("heart_rate"), "heart_rate"),
        bmi=_parse_bmi(config.get("bmi")),
    )


@lru_cache(maxsize=None)
def load_threshold_tables(path: Optional[str] = None) -> ThresholdTables:
    """
    Load, validate and cache the threshold tables.

    Args:
        path: YAML file to read. Defaults to the bundled thresholds.yaml.

    Raises:
        FileNotFoundError: If the file does not exist
        yaml.YAMLError: If YAML parsing fails
        ValueError: If the tables are malformed
    """
    config_path = Path(path) if path else DEFAULT_THRESHOLDS_PATH
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        logger.error("Thresholds file not found", extra={'path': str(config_path)})
        raise
    except yaml.YAMLError as e:
        logger.error("Failed to parse thresholds file", extra={'path': str(config_path), 'error': str(e)})
        raise

    tables = parse_threshold_tables(config)
    logger.info("Threshold tables loaded", extra={'path': str(config_path)})
    return tables
