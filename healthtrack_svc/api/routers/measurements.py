"""
Measurements router - recording and managing glucose, blood pressure and
weight measurements.

All endpoints require API key authentication.

Architecture:
    HTTP Request → Router (this file) → MeasurementService → Repositories → Database

Safety Features:
    - Default query limit to prevent unbounded list queries
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from models.measurement import (
    BloodPressureReading,
    GlucoseReading,
    MeasurementType,
    WeightReading,
)
from schemas import (
    BloodPressureCreate,
    GlucoseCreate,
    LatestMeasurementsResponse,
    MeasurementResponse,
    MeasurementUpdate,
    WeightCreate,
)
from services import MeasurementService
from core.auth import verify_api_key
from core.dependencies import get_measurement_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/measurements",
    tags=["Measurements"],
    dependencies=[Depends(verify_api_key)],
)


DEFAULT_QUERY_LIMIT = 100
MAX_QUERY_LIMIT = 1000


# =============================================================================
# CREATE
# =============================================================================

@router.post(
    "/glucose",
    response_model=MeasurementResponse,
    status_code=201,
    summary="Record blood glucose",
    description="Glucose in mg/dL (20-600). Returns the stored measurement with its status."
)
async def record_glucose(
    body: GlucoseCreate,
    measurement_service: MeasurementService = Depends(get_measurement_service)
):
    return measurement_service.record(
        user_id=body.user_id,
        reading=GlucoseReading(value=body.value),
        timestamp=body.timestamp,
        notes=body.notes,
    )


@router.post(
    "/blood-pressure",
    response_model=MeasurementResponse,
    status_code=201,
    summary="Record blood pressure",
    description="Systolic (70-250) and diastolic (40-150) in mmHg, optional heart rate (30-220 BPM)."
)
async def record_blood_pressure(
    body: BloodPressureCreate,
    measurement_service: MeasurementService = Depends(get_measurement_service)
):
    return measurement_service.record(
        user_id=body.user_id,
        reading=BloodPressureReading(
            systolic=body.systolic,
            diastolic=body.diastolic,
            heart_rate=body.heart_rate,
        ),
        timestamp=body.timestamp,
        notes=body.notes,
    )


@router.post(
    "/weight",
    response_model=MeasurementResponse,
    status_code=201,
    summary="Record body weight",
    description="Weight in kilograms (1-300), stored as grams."
)
async def record_weight(
    body: WeightCreate,
    measurement_service: MeasurementService = Depends(get_measurement_service)
):
    return measurement_service.record(
        user_id=body.user_id,
        reading=WeightReading(grams=body.grams),
        timestamp=body.timestamp,
        notes=body.notes,
    )


# =============================================================================
# READ
# =============================================================================

@router.get(
    "",
    response_model=List[MeasurementResponse],
    summary="List measurements",
    description=f"A user's measurements, newest first. Default limit is {DEFAULT_QUERY_LIMIT}."
)
async def list_measurements(
    user_id: int = Query(..., ge=1),
    type: Optional[MeasurementType] = Query(None, description="Only this measurement type"),
    limit: Optional[int] = Query(None, ge=1, le=MAX_QUERY_LIMIT),
    measurement_service: MeasurementService = Depends(get_measurement_service)
):
    effective_limit = limit
    if effective_limit is None:
        effective_limit = DEFAULT_QUERY_LIMIT
        logger.debug(
            "No limit specified for measurement list, applying default",
            extra={"default_limit": DEFAULT_QUERY_LIMIT}
        )
    return measurement_service.get_measurements(
        user_id=user_id,
        measurement_type=type,
        limit=effective_limit,
    )


@router.get(
    "/latest",
    response_model=LatestMeasurementsResponse,
    summary="Latest measurement of each type"
)
async def latest_measurements(
    user_id: int = Query(..., ge=1),
    measurement_service: MeasurementService = Depends(get_measurement_service)
):
    return measurement_service.get_latest(user_id)


@router.get("/{measurement_id}", response_model=MeasurementResponse, summary="Get a measurement")
async def get_measurement(
    measurement_id: int,
    measurement_service: MeasurementService = Depends(get_measurement_service)
):
    return measurement_service.get_measurement(measurement_id)


# =============================================================================
# UPDATE / DELETE
# =============================================================================

@router.patch(
    "/{measurement_id}",
    response_model=MeasurementResponse,
    summary="Update a measurement",
    description="Change the reading (fields of the measurement's own type only), notes or timestamp."
)
async def update_measurement(
    measurement_id: int,
    body: MeasurementUpdate,
    measurement_service: MeasurementService = Depends(get_measurement_service)
):
    return measurement_service.update_measurement(measurement_id, body)


@router.delete("/{measurement_id}", status_code=204, summary="Delete a measurement")
async def delete_measurement(
    measurement_id: int,
    measurement_service: MeasurementService = Depends(get_measurement_service)
):
    measurement_service.delete_measurement(measurement_id)
    return Response(status_code=204)
