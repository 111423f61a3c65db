"""Minute-bucket duplicate guard.

Two readings collide when their UTC timestamps truncate to the same minute.
"""

from __future__ import annotations

from datetime import datetime, timezone


def minute_bucket(ts: datetime) -> datetime:
    """Normalize to UTC and truncate to minute resolution."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).replace(second=0, microsecond=0)


def should_collect(candidate: datetime, latest: datetime | None) -> bool:
    """Return False only when ``candidate`` shares a minute bucket with ``latest``."""
    if latest is None:
        return True
    return minute_bucket(candidate) != minute_bucket(latest)
