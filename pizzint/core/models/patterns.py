"""Derived hourly and weekday aggregate tables.

Both tables are fully derivable from pizza_readings. The row for the
affected hour / weekday is recomputed in the same transaction as each
reading insert (see DatabaseSink). Migration 001 seeds placeholder rows
(avg 30, stddev 15, count 0) so the forecast view has values before the
first reading lands.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Integer, Numeric, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class HourlyPattern(Base):
    __tablename__ = "hourly_patterns"

    hour: Mapped[int] = mapped_column(Integer, primary_key=True)  # 0-23, DC time
    avg_index: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    min_index: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    max_index: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    std_dev: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    sample_count: Mapped[Optional[int]] = mapped_column(Integer)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class WeekdayPattern(Base):
    __tablename__ = "weekday_patterns"

    weekday: Mapped[int] = mapped_column(Integer, primary_key=True)  # 0=Sunday
    avg_index: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    min_index: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    max_index: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    std_dev: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    sample_count: Mapped[Optional[int]] = mapped_column(Integer)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
