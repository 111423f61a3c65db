"""SQLAlchemy 2.0 ORM models for the PIZZINT tracker.

Re-exports Base and the four model classes:
  - 2 append-only tables: PizzaReading, PizzaSpike
  - 2 derived aggregate tables: HourlyPattern, WeekdayPattern
"""

from .base import Base
from .patterns import HourlyPattern, WeekdayPattern
from .readings import PizzaReading, PizzaSpike

__all__ = [
    "Base",
    "PizzaReading",
    "PizzaSpike",
    "HourlyPattern",
    "WeekdayPattern",
]
