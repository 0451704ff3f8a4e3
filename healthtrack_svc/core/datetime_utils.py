"""
UTC-first datetime utilities for HealthTrack API.

Design Principles:
- Internal processing: timezone-aware datetimes in UTC
- Database storage: ISO 8601 strings in UTC ("2024-01-15T05:00:00Z"), which
  sort lexicographically in timestamp order
- Calendar days: resolved in the configured display timezone, so a reading
  taken at 23:30 local time lands on the local day, not the UTC one

Usage:
    from core.datetime_utils import utc_now, parse_datetime, format_iso, day_window

    dt = parse_datetime("2024-01-15T10:30:00+05:30")  # Converts to UTC
    iso_str = format_iso(dt)  # "2024-01-15T05:00:00Z"
"""
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Tuple, Union


# =============================================================================
# CORE UTILITIES
# =============================================================================

def utc_now() -> datetime:
    """Get current datetime in UTC with timezone info."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """
    Convert a datetime to UTC.

    - If datetime is naive (no timezone), assumes it's already UTC
    - If datetime has timezone, converts to UTC

    Example:
        >>> ist = timezone(timedelta(hours=5, minutes=30))
        >>> to_utc(datetime(2024, 1, 15, 16, 0, tzinfo=ist)).hour
        10
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


# =============================================================================
# PARSING & FORMATTING
# =============================================================================

def parse_datetime(value: Union[str, datetime]) -> datetime:
    """
    Parse a datetime value to UTC datetime.

    Accepts a datetime object or an ISO 8601 string (with or without
    timezone, 'Z' suffix allowed).

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return to_utc(value)

    if not isinstance(value, str):
        raise ValueError(f"Expected datetime or string, got {type(value).__name__}")

    value = value.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    try:
        return to_utc(datetime.fromisoformat(value))
    except ValueError:
        raise ValueError(f"Cannot parse datetime: '{value}'")


def format_iso(dt: datetime) -> str:
    """
    Format datetime to ISO 8601 string with 'Z' suffix for UTC.

    Example:
        >>> format_iso(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00Z'
    """
    return to_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_for_display(dt: datetime, tz: tzinfo) -> str:
    """Format a timestamp in the display timezone, e.g. '15/01/2024 10:30'."""
    return to_utc(dt).astimezone(tz).strftime("%d/%m/%Y %H:%M")


# =============================================================================
# CALENDAR DAYS
# =============================================================================

def local_date(dt: datetime, tz: tzinfo) -> date:
    """Calendar date of a timestamp in the given timezone (time of day ignored)."""
    return to_utc(dt).astimezone(tz).date()


def today_in(tz: tzinfo) -> date:
    """Today's calendar date in the given timezone."""
    return utc_now().astimezone(tz).date()


def start_of_day(day: date, tz: tzinfo) -> datetime:
    """UTC instant at which the given local calendar day begins."""
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def day_window(reference_date: date, days: int, tz: tzinfo) -> Tuple[datetime, datetime]:
    """
    Half-open UTC window [start, end) covering `days` whole local days
    ending on (and including) `reference_date`.

    Example:
        >>> start, end = day_window(date(2024, 1, 7), 7, timezone.utc)
        >>> format_iso(start), format_iso(end)
        ('2024-01-01T00:00:00Z', '2024-01-08T00:00:00Z')
    """
    first_day = reference_date - timedelta(days=days - 1)
    return start_of_day(first_day, tz), start_of_day(reference_date + timedelta(days=1), tz)


def previous_day_window(reference_date: date, days: int, tz: tzinfo) -> Tuple[datetime, datetime]:
    """The equal-length window immediately preceding day_window(reference_date, days)."""
    return day_window(reference_date - timedelta(days=days), days, tz)
