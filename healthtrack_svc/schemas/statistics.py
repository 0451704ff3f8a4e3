"""
Pydantic schemas for statistics responses.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from models.measurement import MeasurementType


class ChannelStatisticsResponse(BaseModel):
    count: int
    average: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None


class WindowStatisticsResponse(BaseModel):
    """Statistics of one time window."""
    start: str = Field(..., description="Inclusive window start (ISO 8601 UTC)")
    end: str = Field(..., description="Exclusive window end (ISO 8601 UTC)")
    count: int
    average: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    channels: Dict[str, ChannelStatisticsResponse]
    formatted: Dict[str, str] = Field(
        ...,
        description="Display strings for average/minimum/maximum ('N/A' when unavailable)"
    )


class TrendResponse(BaseModel):
    percentage: float = Field(..., description="Absolute change of the primary average, one decimal")
    increased: bool
    arrow: str


class DayBucketResponse(BaseModel):
    date: str = Field(..., description="Calendar date (YYYY-MM-DD) in the display timezone")
    label: str = Field(..., description="Chart label, dd/MM")
    values: Optional[Dict[str, float]] = Field(
        None,
        description="Reading shown for the day in display units, null when the day has none"
    )


class StatisticsSummaryResponse(BaseModel):
    """Window statistics, period-over-period trend and chart buckets."""
    user_id: int
    type: MeasurementType
    days: int
    unit: str
    timezone: str
    current: WindowStatisticsResponse
    previous: WindowStatisticsResponse
    trend: Optional[TrendResponse] = None
    buckets: List[DayBucketResponse]
