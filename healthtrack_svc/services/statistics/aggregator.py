"""
Series aggregation and calendar-day bucketing.

Responsible for:
- Extracting numeric channels from measurement readings
- Computing count / average / min / max per channel
- Laying a series out on a fixed run of calendar days for charts

Readings are kept in storage units (weight in grams). The only unit
conversion here is the chart value of a weight bucket, which is in kg.
"""
import logging
from dataclasses import dataclass
from datetime import date, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Sequence

from core.datetime_utils import local_date
from models.measurement import (
    BloodPressureReading,
    GlucoseReading,
    Measurement,
    MeasurementType,
    WeightReading,
)
from services.statistics.formatting import grams_to_kilograms

logger = logging.getLogger(__name__)


CHANNELS: Dict[MeasurementType, Sequence[str]] = {
    MeasurementType.GLUCOSE: ("value",),
    MeasurementType.BLOOD_PRESSURE: ("systolic", "diastolic", "heart_rate"),
    MeasurementType.WEIGHT: ("value",),
}

PRIMARY_CHANNEL: Dict[MeasurementType, str] = {
    MeasurementType.GLUCOSE: "value",
    MeasurementType.BLOOD_PRESSURE: "systolic",
    MeasurementType.WEIGHT: "value",
}

BUCKET_LABEL_FORMAT = "%d/%m"


# =============================================================================
# STATISTICS STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class ChannelStatistics:
    """Statistics of one numeric channel; numeric fields are None when count is 0."""
    count: int
    average: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    @property
    def available(self) -> bool:
        return self.count > 0

    @classmethod
    def from_values(cls, values: Iterable[Optional[float]]) -> "ChannelStatistics":
        """Zero and missing entries are dropped before computing."""
        present = [v for v in values if v]
        if not present:
            return cls(count=0)
        return cls(
            count=len(present),
            average=sum(present) / len(present),
            minimum=min(present),
            maximum=max(present),
        )


@dataclass(frozen=True)
class SeriesStatistics:
    """
    Statistics of a measurement series, one entry per channel.

    count/average/minimum/maximum delegate to the primary channel
    (systolic for blood pressure, the single value otherwise).
    """
    measurement_type: MeasurementType
    channels: Dict[str, ChannelStatistics]

    @property
    def primary(self) -> ChannelStatistics:
        return self.channels[PRIMARY_CHANNEL[self.measurement_type]]

    @property
    def count(self) -> int:
        return self.primary.count

    @property
    def average(self) -> Optional[float]:
        return self.primary.average

    @property
    def minimum(self) -> Optional[float]:
        return self.primary.minimum

    @property
    def maximum(self) -> Optional[float]:
        return self.primary.maximum

    @property
    def available(self) -> bool:
        return self.primary.available


@dataclass(frozen=True)
class DayBucket:
    """One calendar day of a chart series; values is None when the day has no reading."""
    day: date
    label: str
    values: Optional[Dict[str, float]] = None

    @property
    def has_data(self) -> bool:
        return self.values is not None


# =============================================================================
# AGGREGATION
# =============================================================================

def channel_values(measurement: Measurement, measurement_type: MeasurementType) -> Dict[str, Optional[int]]:
    """
    Raw channel values of a measurement in storage units.

    Returns an empty dict when the measurement has no reading of the
    requested type.
    """
    reading = measurement.payload
    if reading is None or reading.measurement_type is not measurement_type:
        return {}
    if isinstance(reading, GlucoseReading):
        return {"value": reading.value}
    if isinstance(reading, BloodPressureReading):
        return {
            "systolic": reading.systolic,
            "diastolic": reading.diastolic,
            "heart_rate": reading.heart_rate,
        }
    if isinstance(reading, WeightReading):
        return {"value": reading.grams}
    return {}


def aggregate(series: Iterable[Measurement], measurement_type: MeasurementType) -> SeriesStatistics:
    """
    Aggregate a series of one measurement type.

    Each channel excludes its own zero or missing entries, so a blood pressure
    reading without heart rate still counts toward systolic and diastolic.
    An empty series yields count 0 and None for every numeric field.
    """
    extracted = [channel_values(m, measurement_type) for m in series]
    channels = {
        name: ChannelStatistics.from_values(values.get(name) for values in extracted)
        for name in CHANNELS[measurement_type]
    }
    return SeriesStatistics(measurement_type=measurement_type, channels=channels)


# =============================================================================
# DAY BUCKETS
# =============================================================================

def _chart_values(measurement: Measurement, measurement_type: MeasurementType) -> Optional[Dict[str, float]]:
    raw = channel_values(measurement, measurement_type)
    present = {name: value for name, value in raw.items() if value}
    if not present:
        return None
    if measurement_type is MeasurementType.WEIGHT:
        return {"value": float(grams_to_kilograms(present["value"]))}
    return present


def bucket_by_day(
    series: Iterable[Measurement],
    measurement_type: MeasurementType,
    reference_date: date,
    window_days: int = 7,
    tz: tzinfo = timezone.utc,
) -> List[DayBucket]:
    """
    Lay a series out on the window_days calendar days ending at reference_date.

    Buckets are ordered oldest to newest. Each takes the most recent reading
    whose local date (in tz) matches; days without one get values=None.

    Raises:
        ValueError: If window_days is smaller than 1
    """
    if window_days < 1:
        raise ValueError(f"window_days must be at least 1, got {window_days}")

    newest_first = sorted(series, key=lambda m: m.timestamp, reverse=True)

    by_day: Dict[date, Dict[str, float]] = {}
    for measurement in newest_first:
        day = local_date(measurement.timestamp, tz)
        if day in by_day:
            continue
        values = _chart_values(measurement, measurement_type)
        if values is not None:
            by_day[day] = values

    buckets = []
    for offset in range(window_days - 1, -1, -1):
        day = reference_date - timedelta(days=offset)
        buckets.append(DayBucket(
            day=day,
            label=day.strftime(BUCKET_LABEL_FORMAT),
            values=by_day.get(day),
        ))
    return buckets
