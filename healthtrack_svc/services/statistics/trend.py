"""
Period-over-period trend of a series' primary average.
"""
from dataclasses import dataclass
from typing import Optional, Sequence

from models.measurement import Measurement, MeasurementType
from services.statistics.aggregator import SeriesStatistics, aggregate


@dataclass(frozen=True)
class TrendResult:
    percentage: float  # absolute change, one decimal
    increased: bool

    @property
    def arrow(self) -> str:
        return "↑" if self.increased else "↓"


def compare_statistics(current: SeriesStatistics, previous: SeriesStatistics) -> Optional[TrendResult]:
    """
    Trend between two already-aggregated windows.

    None when either primary average is unavailable or the previous average
    is zero.
    """
    cur, prev = current.average, previous.average
    if cur is None or prev is None or prev == 0:
        return None
    percentage = round(abs((cur - prev) / prev) * 100, 1)
    return TrendResult(percentage=percentage, increased=cur > prev)


def compare_trend(
    current: Sequence[Measurement],
    previous: Sequence[Measurement],
    measurement_type: MeasurementType,
) -> Optional[TrendResult]:
    """
    Compare the current window with the previous one.

    Blood pressure compares systolic averages only.
    """
    if not current or not previous:
        return None
    return compare_statistics(
        aggregate(current, measurement_type),
        aggregate(previous, measurement_type),
    )
