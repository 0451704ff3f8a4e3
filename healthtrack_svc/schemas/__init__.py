"""
Pydantic schemas for API request/response validation.

This module contains all Pydantic models used at API boundaries.
"""
from schemas.user import UserCreate, UserResponse
from schemas.measurement import (
    GlucoseCreate,
    BloodPressureCreate,
    WeightCreate,
    MeasurementUpdate,
    GlucosePayload,
    BloodPressurePayload,
    WeightPayload,
    MeasurementResponse,
    LatestMeasurementsResponse,
)
from schemas.statistics import (
    ChannelStatisticsResponse,
    WindowStatisticsResponse,
    TrendResponse,
    DayBucketResponse,
    StatisticsSummaryResponse,
)

__all__ = [
    # User schemas
    "UserCreate",
    "UserResponse",
    # Measurement schemas
    "GlucoseCreate",
    "BloodPressureCreate",
    "WeightCreate",
    "MeasurementUpdate",
    "GlucosePayload",
    "BloodPressurePayload",
    "WeightPayload",
    "MeasurementResponse",
    "LatestMeasurementsResponse",
    # Statistics schemas
    "ChannelStatisticsResponse",
    "WindowStatisticsResponse",
    "TrendResponse",
    "DayBucketResponse",
    "StatisticsSummaryResponse",
]
