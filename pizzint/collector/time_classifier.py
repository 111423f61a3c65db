"""Calendar classification of an instant in Washington, DC local time.

The reference timezone is fixed: the host's local timezone is never
consulted. Weekdays follow the Sunday = 0 convention used by the stored
``dc_weekday`` column.

Examples::

    >>> from datetime import datetime, timezone
    >>> classify(datetime(2025, 1, 15, 19, 0, tzinfo=timezone.utc))
    TimeInfo(hour=14, weekday=3, is_overtime=False, is_weekend=False)
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from pizzint.collector.domain import TimeInfo

DC_TZ = ZoneInfo("America/New_York")

WORKDAY_START_HOUR = 6
WORKDAY_END_HOUR = 18
WEEKEND_DAYS = frozenset({0, 6})  # Sunday, Saturday


def is_overtime(hour: int) -> bool:
    """True when the hour falls outside the [06:00, 18:00) window."""
    return not (WORKDAY_START_HOUR <= hour < WORKDAY_END_HOUR)


def is_weekend(weekday: int) -> bool:
    return weekday in WEEKEND_DAYS


def classify(instant: datetime) -> TimeInfo:
    """Derive DC hour, weekday, overtime and weekend flags for an instant.

    Args:
        instant: The moment to classify. Naive datetimes are taken as UTC.

    Returns:
        TimeInfo for the instant converted to America/New_York.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    local = instant.astimezone(DC_TZ)
    hour = local.hour
    weekday = local.isoweekday() % 7
    return TimeInfo(
        hour=hour,
        weekday=weekday,
        is_overtime=is_overtime(hour),
        is_weekend=is_weekend(weekday),
    )
