"""
Statistics router - window statistics, trend and chart buckets.

All endpoints require API key authentication. Windows are whole calendar days
in the configured display timezone, ending today.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from models.measurement import MeasurementType
from schemas import MeasurementResponse, StatisticsSummaryResponse
from services import StatisticsService
from core.auth import verify_api_key
from core.config import settings
from core.dependencies import get_statistics_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/statistics",
    tags=["Statistics"],
    dependencies=[Depends(verify_api_key)],
)

MAX_WINDOW_DAYS = 365


def _window_days(days: Optional[int]) -> int:
    return days if days is not None else settings.healthtrack_default_window_days


@router.get(
    "/{measurement_type}",
    response_model=StatisticsSummaryResponse,
    summary="Statistics summary",
    description="Average/min/max for the current and previous windows, the trend between "
                "them and one chart bucket per day."
)
async def get_statistics(
    measurement_type: MeasurementType,
    user_id: int = Query(..., ge=1),
    days: Optional[int] = Query(None, ge=1, le=MAX_WINDOW_DAYS, description="Window length in days"),
    statistics_service: StatisticsService = Depends(get_statistics_service)
):
    return statistics_service.get_summary(
        user_id=user_id,
        measurement_type=measurement_type,
        days=_window_days(days),
    )


@router.get(
    "/{measurement_type}/measurements",
    response_model=List[MeasurementResponse],
    summary="Measurements in the current window",
    description="Newest first, each with its classified status."
)
async def get_window_measurements(
    measurement_type: MeasurementType,
    user_id: int = Query(..., ge=1),
    days: Optional[int] = Query(None, ge=1, le=MAX_WINDOW_DAYS),
    statistics_service: StatisticsService = Depends(get_statistics_service)
):
    return statistics_service.get_window_measurements(
        user_id=user_id,
        measurement_type=measurement_type,
        days=_window_days(days),
    )
