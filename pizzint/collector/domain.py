"""Immutable value types flowing through the collection pipeline.

Reading and Spike mirror the pizza_readings / pizza_spikes rows. Their
``to_record`` / ``from_record`` helpers use the same key names as the
database columns, which is also the layout of the flat-file document.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class TimeInfo:
    """Calendar attributes of an instant in the reference timezone.

    Attributes:
        hour: Hour of day, 0-23.
        weekday: Day of week, 0 = Sunday ... 6 = Saturday.
        is_overtime: True outside the 06:00-18:00 window.
        is_weekend: True on Saturday and Sunday.
    """

    hour: int
    weekday: int
    is_overtime: bool
    is_weekend: bool


@dataclass(frozen=True)
class Reading:
    """One observation of the pizza index."""

    timestamp: datetime
    index_value: float
    hour_of_day: int
    weekday: int
    is_overtime: bool
    is_weekend: bool
    raw_payload: Any = None

    @classmethod
    def create(
        cls,
        timestamp: datetime,
        index_value: float,
        time_info: TimeInfo,
        raw_payload: Any = None,
    ) -> Reading:
        """Build a reading, rounding the index to the stored 2 decimal places."""
        return cls(
            timestamp=timestamp,
            index_value=round(index_value, 2),
            hour_of_day=time_info.hour,
            weekday=time_info.weekday,
            is_overtime=time_info.is_overtime,
            is_weekend=time_info.is_weekend,
            raw_payload=raw_payload,
        )

    def to_record(self, include_raw: bool = False) -> dict[str, Any]:
        record: dict[str, Any] = {
            "timestamp": _format_ts(self.timestamp),
            "index_value": self.index_value,
            "dc_hour": self.hour_of_day,
            "dc_weekday": self.weekday,
            "is_overtime": self.is_overtime,
            "is_weekend": self.is_weekend,
        }
        if include_raw:
            record["raw_data"] = self.raw_payload
        return record

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Reading:
        return cls(
            timestamp=parse_timestamp(record["timestamp"]),
            index_value=float(record["index_value"]),
            hour_of_day=int(record["dc_hour"]),
            weekday=int(record["dc_weekday"]),
            is_overtime=bool(record.get("is_overtime", False)),
            is_weekend=bool(record.get("is_weekend", False)),
            raw_payload=record.get("raw_data"),
        )


@dataclass(frozen=True)
class Spike:
    """A flagged transition between two consecutive readings."""

    timestamp: datetime
    index_from: float
    index_to: float
    change_amount: float
    is_overtime: bool
    is_weekend: bool
    notes: str | None = None

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "timestamp": _format_ts(self.timestamp),
            "index_from": self.index_from,
            "index_to": self.index_to,
            "change_amount": self.change_amount,
            "is_overtime": self.is_overtime,
            "is_weekend": self.is_weekend,
        }
        if self.notes is not None:
            record["notes"] = self.notes
        return record


def _format_ts(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="seconds")


def parse_timestamp(value: str | datetime) -> datetime:
    ts = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts
