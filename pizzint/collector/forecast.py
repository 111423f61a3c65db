"""Blended pizza-index forecast from historical patterns.

Mirrors the ``combined_forecast`` column of the ``readings_with_forecast``
view: 60% hour-of-day average, 30% weekday average, 10% global average.
Any missing component yields no forecast, as NULL does in SQL.
"""

from __future__ import annotations

from dataclasses import dataclass

HOURLY_WEIGHT = 0.6
WEEKDAY_WEIGHT = 0.3
GLOBAL_WEIGHT = 0.1


def blended_forecast(
    hourly_avg: float | None,
    weekday_avg: float | None,
    global_avg: float | None,
) -> float | None:
    if hourly_avg is None or weekday_avg is None or global_avg is None:
        return None
    return round(
        HOURLY_WEIGHT * hourly_avg
        + WEEKDAY_WEIGHT * weekday_avg
        + GLOBAL_WEIGHT * global_avg,
        2,
    )


@dataclass(frozen=True)
class Forecast:
    """Expected index for a DC hour / weekday slot."""

    hour: int
    weekday: int
    hourly_forecast: float | None
    hourly_stddev: float | None
    weekday_forecast: float | None
    global_average: float | None

    @property
    def combined_forecast(self) -> float | None:
        return blended_forecast(
            self.hourly_forecast, self.weekday_forecast, self.global_average
        )

    def to_dict(self) -> dict[str, float | int | None]:
        return {
            "hour": self.hour,
            "weekday": self.weekday,
            "hourly_forecast": self.hourly_forecast,
            "hourly_stddev": self.hourly_stddev,
            "weekday_forecast": self.weekday_forecast,
            "global_average": self.global_average,
            "combined_forecast": self.combined_forecast,
        }
