"""
Domain models for the HealthTrack service.

This module contains the internal domain models shared by repositories,
services and the statistics engine.
"""
from models.measurement import (
    MeasurementType,
    StatusCategory,
    GlucoseReading,
    BloodPressureReading,
    WeightReading,
    Reading,
    Measurement,
)
from models.user import Role, User

__all__ = [
    "MeasurementType",
    "StatusCategory",
    "GlucoseReading",
    "BloodPressureReading",
    "WeightReading",
    "Reading",
    "Measurement",
    "Role",
    "User",
]
