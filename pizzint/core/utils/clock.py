"""Injectable time sources.

Every "now" read in the collector goes through a Clock so that time
classification and minute-bucket deduplication are deterministic in tests
and replays.

Examples::

    >>> from datetime import datetime, timezone
    >>> FixedClock(datetime(2025, 1, 15, 19, 0, 30, 999, tzinfo=timezone.utc)).now()
    datetime.datetime(2025, 1, 15, 19, 0, 30, tzinfo=datetime.timezone.utc)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Source of the current instant (aware, UTC, second precision)."""

    def now(self) -> datetime: ...


class SystemClock:
    """Wall-clock time from the host, normalized to UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(microsecond=0)


class FixedClock:
    """Clock frozen at a given instant.

    Naive datetimes are interpreted as UTC. ``advance`` moves the clock
    forward so sequential ticks can be simulated.
    """

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._instant.replace(microsecond=0)

    def advance(self, **kwargs: float) -> None:
        """Shift the frozen instant by ``timedelta(**kwargs)``."""
        self._instant = self._instant + timedelta(**kwargs)
