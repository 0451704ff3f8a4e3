"""
Measurement statistics core.

Pure, synchronous functions over in-memory measurement series:

- StatusClassifier: per-measurement status against threshold tables
- aggregate / bucket_by_day: per-channel statistics and chart day buckets
- compare_trend: period-over-period change of the primary average
- formatting helpers for display strings
"""
from services.statistics.classifier import StatusClassifier
from services.statistics.aggregator import (
    ChannelStatistics,
    SeriesStatistics,
    DayBucket,
    aggregate,
    bucket_by_day,
    channel_values,
)
from services.statistics.trend import TrendResult, compare_trend, compare_statistics
from services.statistics.formatting import (
    NOT_AVAILABLE,
    UNITS,
    format_blood_pressure,
    format_glucose,
    format_measurement,
    format_reading,
    format_statistics,
    format_weight,
    grams_to_kilograms,
)

__all__ = [
    "StatusClassifier",
    "ChannelStatistics",
    "SeriesStatistics",
    "DayBucket",
    "aggregate",
    "bucket_by_day",
    "channel_values",
    "TrendResult",
    "compare_trend",
    "compare_statistics",
    "NOT_AVAILABLE",
    "UNITS",
    "format_blood_pressure",
    "format_glucose",
    "format_measurement",
    "format_reading",
    "format_statistics",
    "format_weight",
    "grams_to_kilograms",
]
