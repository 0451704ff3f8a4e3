"""
Pydantic schemas for measurement-related API operations.

Create schemas enforce plausible physiological ranges; weight is accepted in
kilograms and stored as integer grams.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from models.measurement import MeasurementType, StatusCategory


class _MeasurementCreateBase(BaseModel):
    user_id: int = Field(..., ge=1, description="Owner of the measurement")
    timestamp: Optional[datetime] = Field(
        None,
        description="When the measurement was taken (ISO 8601). Defaults to now."
    )
    notes: Optional[str] = Field(None, max_length=1000)


class GlucoseCreate(_MeasurementCreateBase):
    """Schema for recording a blood glucose measurement."""
    value: int = Field(..., ge=20, le=600, description="Blood glucose in mg/dL")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 1,
                "value": 105,
                "timestamp": "2025-01-01T08:00:00Z",
                "notes": "fasting"
            }
        }


class BloodPressureCreate(_MeasurementCreateBase):
    """Schema for recording a blood pressure measurement."""
    systolic: int = Field(..., ge=70, le=250, description="Systolic pressure in mmHg")
    diastolic: int = Field(..., ge=40, le=150, description="Diastolic pressure in mmHg")
    heart_rate: Optional[int] = Field(None, ge=30, le=220, description="Heart rate in BPM")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 1,
                "systolic": 120,
                "diastolic": 80,
                "heart_rate": 72
            }
        }


class WeightCreate(_MeasurementCreateBase):
    """Schema for recording a body weight measurement (kilograms)."""
    weight_kg: float = Field(..., ge=1, le=300, description="Body weight in kilograms")

    @property
    def grams(self) -> int:
        return int(round(self.weight_kg * 1000))

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": 1,
                "weight_kg": 78.5
            }
        }


class MeasurementUpdate(BaseModel):
    """
    Partial update of a measurement.

    Only the reading fields belonging to the measurement's own type may be
    sent; the service rejects the others.
    """
    timestamp: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=1000)
    value: Optional[int] = Field(None, ge=20, le=600, description="Glucose in mg/dL")
    systolic: Optional[int] = Field(None, ge=70, le=250)
    diastolic: Optional[int] = Field(None, ge=40, le=150)
    heart_rate: Optional[int] = Field(None, ge=30, le=220)
    weight_kg: Optional[float] = Field(None, ge=1, le=300)

    @model_validator(mode="after")
    def _not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        return self


class GlucosePayload(BaseModel):
    value: int


class BloodPressurePayload(BaseModel):
    systolic: int
    diastolic: int
    heart_rate: Optional[int] = None


class WeightPayload(BaseModel):
    grams: int
    kilograms: float


class MeasurementResponse(BaseModel):
    """Schema for measurement response with derived status and display value."""
    id: int
    user_id: int
    type: MeasurementType
    timestamp: str = Field(..., description="ISO 8601 UTC timestamp")
    notes: Optional[str] = None
    glucose: Optional[GlucosePayload] = None
    blood_pressure: Optional[BloodPressurePayload] = None
    weight: Optional[WeightPayload] = None
    status: StatusCategory
    display_value: str = Field(..., description="Formatted reading, e.g. '120/80 mmHg'")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 10,
                "user_id": 1,
                "type": "blood_pressure",
                "timestamp": "2025-01-01T08:00:00Z",
                "notes": None,
                "glucose": None,
                "blood_pressure": {"systolic": 145, "diastolic": 85, "heart_rate": 70},
                "weight": None,
                "status": "high",
                "display_value": "145/85 mmHg, 70 BPM"
            }
        }


class LatestMeasurementsResponse(BaseModel):
    """Most recent measurement of each type (null where none exists)."""
    glucose: Optional[MeasurementResponse] = None
    blood_pressure: Optional[MeasurementResponse] = None
    weight: Optional[MeasurementResponse] = None
