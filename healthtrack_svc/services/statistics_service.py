"""
Service layer for measurement statistics.

Builds the statistics summary shown for a user and measurement type:

    1. Resolve the current window (the `days` calendar days ending today in
       the display timezone) and the equal-length window right before it
    2. Fetch both series from the repository
    3. Aggregate each, compare their primary averages, and lay the current
       series out on day buckets

The numeric work is delegated to the pure functions in services.statistics.

Dependency Injection:
    Use core.dependencies.get_statistics_service() in routers with Depends().
"""
import logging
from datetime import date, tzinfo
from typing import List, Optional, Tuple

from repositories import MeasurementRepository, UserRepository
from models.measurement import Measurement, MeasurementType
from schemas import (
    ChannelStatisticsResponse,
    DayBucketResponse,
    MeasurementResponse,
    StatisticsSummaryResponse,
    TrendResponse,
    WindowStatisticsResponse,
)
from services.measurement_service import build_measurement_response
from services.statistics import (
    UNITS,
    SeriesStatistics,
    StatusClassifier,
    aggregate,
    bucket_by_day,
    compare_statistics,
    format_statistics,
)
from core.datetime_utils import day_window, format_iso, previous_day_window, today_in
from core.exceptions import UserNotFoundError

logger = logging.getLogger(__name__)


def _window_response(stats: SeriesStatistics, window: Tuple) -> WindowStatisticsResponse:
    start, end = window
    return WindowStatisticsResponse(
        start=format_iso(start),
        end=format_iso(end),
        count=stats.count,
        average=stats.average,
        minimum=stats.minimum,
        maximum=stats.maximum,
        channels={
            name: ChannelStatisticsResponse(
                count=channel.count,
                average=channel.average,
                minimum=channel.minimum,
                maximum=channel.maximum,
            )
            for name, channel in stats.channels.items()
        },
        formatted=format_statistics(stats),
    )


class StatisticsService:
    """
    Service layer for statistics over time windows.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        measurement_repository: MeasurementRepository,
        classifier: StatusClassifier,
        display_timezone: tzinfo,
    ):
        self._user_repo = user_repository
        self._measurement_repo = measurement_repository
        self._classifier = classifier
        self._tz = display_timezone

    def get_summary(
        self,
        user_id: int,
        measurement_type: MeasurementType,
        days: int,
        reference_date: Optional[date] = None,
    ) -> StatisticsSummaryResponse:
        """
        Statistics of the current window, its trend against the previous
        window, and one chart bucket per day.

        Args:
            user_id: Owner of the measurements.
            measurement_type: Which series to summarize.
            days: Window length in calendar days.
            reference_date: Last day of the current window. Defaults to today
                in the display timezone.

        Raises:
            UserNotFoundError: If the user doesn't exist.
        """
        self._ensure_user(user_id)
        reference_date = reference_date or today_in(self._tz)

        current_window = day_window(reference_date, days, self._tz)
        previous_window = previous_day_window(reference_date, days, self._tz)

        current_series = self._fetch(user_id, measurement_type, current_window)
        previous_series = self._fetch(user_id, measurement_type, previous_window)

        current_stats = aggregate(current_series, measurement_type)
        previous_stats = aggregate(previous_series, measurement_type)
        trend = compare_statistics(current_stats, previous_stats)

        buckets = bucket_by_day(
            current_series,
            measurement_type,
            reference_date=reference_date,
            window_days=days,
            tz=self._tz,
        )

        logger.info(
            f"Statistics for user {user_id} ({measurement_type.value}, {days}d): "
            f"current={current_stats.count}, previous={previous_stats.count}, "
            f"trend={'n/a' if trend is None else trend.percentage}"
        )

        return StatisticsSummaryResponse(
            user_id=user_id,
            type=measurement_type,
            days=days,
            unit=UNITS[measurement_type],
            timezone=str(self._tz),
            current=_window_response(current_stats, current_window),
            previous=_window_response(previous_stats, previous_window),
            trend=TrendResponse(
                percentage=trend.percentage,
                increased=trend.increased,
                arrow=trend.arrow,
            ) if trend else None,
            buckets=[
                DayBucketResponse(
                    date=bucket.day.isoformat(),
                    label=bucket.label,
                    values=bucket.values,
                )
                for bucket in buckets
            ],
        )

    def get_window_measurements(
        self,
        user_id: int,
        measurement_type: MeasurementType,
        days: int,
        reference_date: Optional[date] = None,
    ) -> List[MeasurementResponse]:
        """Measurements of the current window, newest first, each with its status."""
        self._ensure_user(user_id)
        reference_date = reference_date or today_in(self._tz)
        window = day_window(reference_date, days, self._tz)
        return [
            build_measurement_response(m, self._classifier)
            for m in self._fetch(user_id, measurement_type, window)
        ]

    def _fetch(self, user_id: int, measurement_type: MeasurementType, window: Tuple) -> List[Measurement]:
        start, end = window
        return self._measurement_repo.fetch_measurements(
            user_id=user_id,
            measurement_type=measurement_type,
            window_start=start,
            window_end=end,
        )

    def _ensure_user(self, user_id: int) -> None:
        if not self._user_repo.exists(user_id):
            raise UserNotFoundError(user_id=user_id)
