"""Pizza index readings and detected spikes.

pizza_readings holds one row per collection tick. Uniqueness per minute is
enforced by an expression index on the UTC minute bucket, so a second insert
in the same minute fails with SQLSTATE 23505 (unique_violation).

pizza_spikes is append-only and independent of pizza_readings (no FK): a
spike row is written in its own transaction after the reading commits.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime,
    Index,
    Integer,
    Numeric,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# date_trunc on timestamptz is only STABLE; shifting to UTC makes it IMMUTABLE
# and therefore indexable.
MINUTE_BUCKET_EXPR = "date_trunc('minute', timestamp AT TIME ZONE 'UTC')"


class PizzaReading(Base):
    __tablename__ = "pizza_readings"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    index_value: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    dc_hour: Mapped[int] = mapped_column(Integer, nullable=False)
    dc_weekday: Mapped[int] = mapped_column(Integer, nullable=False)
    is_overtime: Mapped[bool] = mapped_column(Boolean, server_default="false")
    is_weekend: Mapped[bool] = mapped_column(Boolean, server_default="false")
    raw_data: Mapped[Optional[Any]] = mapped_column(
        JSONB(none_as_null=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (
        Index("ix_pizza_readings_timestamp", text("timestamp DESC")),
        Index("ix_pizza_readings_dc_hour", "dc_hour"),
        Index("ix_pizza_readings_dc_weekday", "dc_weekday"),
        Index("uq_pizza_readings_minute", text(MINUTE_BUCKET_EXPR), unique=True),
    )


class PizzaSpike(Base):
    __tablename__ = "pizza_spikes"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    index_from: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    index_to: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    change_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    is_overtime: Mapped[bool] = mapped_column(Boolean, server_default="false")
    is_weekend: Mapped[bool] = mapped_column(Boolean, server_default="false")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    __table_args__ = (Index("ix_pizza_spikes_timestamp", text("timestamp DESC")),)
