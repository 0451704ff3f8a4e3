"""
Domain model for measurements.

A measurement is a timestamped observation owned by a user. Its type-specific
payload is one of three readings:

    GlucoseReading(value)                                  mg/dL
    BloodPressureReading(systolic, diastolic, heart_rate)  mmHg, BPM
    WeightReading(grams)                                   grams (no floats)

`payload` may be None when the base row exists but its reading row is
missing; consumers treat that as "no data", never as an error.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union


class MeasurementType(str, Enum):
    """Kinds of measurement a user can record."""
    GLUCOSE = "glucose"
    BLOOD_PRESSURE = "blood_pressure"
    WEIGHT = "weight"


class StatusCategory(str, Enum):
    """Derived clinical status of a single measurement."""
    NORMAL = "normal"
    LOW = "low"
    HIGH = "high"
    VERY_HIGH = "very_high"


@dataclass(frozen=True)
class GlucoseReading:
    value: int  # mg/dL

    measurement_type = MeasurementType.GLUCOSE


@dataclass(frozen=True)
class BloodPressureReading:
    systolic: int  # mmHg
    diastolic: int  # mmHg
    heart_rate: Optional[int] = None  # BPM

    measurement_type = MeasurementType.BLOOD_PRESSURE


@dataclass(frozen=True)
class WeightReading:
    grams: int

    measurement_type = MeasurementType.WEIGHT


Reading = Union[GlucoseReading, BloodPressureReading, WeightReading]


@dataclass(frozen=True)
class Measurement:
    """Model representing a stored measurement with its reading."""

    id: int
    user_id: int
    type: MeasurementType
    timestamp: datetime
    payload: Optional[Reading] = None
    notes: Optional[str] = None

    def __post_init__(self):
        if self.payload is not None and self.payload.measurement_type is not self.type:
            raise ValueError(
                f"Measurement {self.id} of type '{self.type.value}' carries a "
                f"{type(self.payload).__name__} payload"
            )

    @property
    def glucose(self) -> Optional[GlucoseReading]:
        return self.payload if isinstance(self.payload, GlucoseReading) else None

    @property
    def blood_pressure(self) -> Optional[BloodPressureReading]:
        return self.payload if isinstance(self.payload, BloodPressureReading) else None

    @property
    def weight(self) -> Optional[WeightReading]:
        return self.payload if isinstance(self.payload, WeightReading) else None
