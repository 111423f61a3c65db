"""PostgreSQL persistence sink.

Uses an async SQLAlchemy engine (asyncpg) that the sink builds on open()
and disposes on close(), or an engine / session factory handed in by the
caller. Sessions are configured with autoflush=False and
expire_on_commit=False for explicit transaction control.

Write semantics:
- Reading insert and the hourly / weekday pattern refresh share one
  transaction. A unique-index collision on the minute bucket (SQLSTATE
  23505) is raised as DuplicateReading; anything else as PersistenceFailure.
- Spike insert runs in its own transaction, after the reading committed.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from pizzint.collector.dedup import minute_bucket
from pizzint.collector.domain import Reading, Spike
from pizzint.collector.forecast import Forecast
from pizzint.core.config import Settings
from pizzint.core.exceptions import DuplicateReading, PersistenceFailure
from pizzint.core.models import HourlyPattern, PizzaReading, PizzaSpike, WeekdayPattern
from pizzint.storage.base import ReadingSink

UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    """Check the SQLSTATE of a wrapped DBAPI error (asyncpg or psycopg2)."""
    for candidate in (exc.orig, getattr(exc.orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code == UNIQUE_VIOLATION:
            return True
    return False


def _to_decimal(value: float) -> Decimal:
    if not math.isfinite(value):
        raise PersistenceFailure(f"Refusing to store non-finite value {value!r}")
    return Decimal(str(value))


def _to_float(value: Decimal | float | None) -> float | None:
    return None if value is None else round(float(value), 2)


class DatabaseSink(ReadingSink):
    """Persist readings and spikes to PostgreSQL.

    Usage::

        async with DatabaseSink.from_settings(settings) as sink:
            latest = await sink.most_recent_reading()
    """

    BACKEND: str = "database"

    def __init__(
        self,
        database_url: str | None = None,
        *,
        engine: AsyncEngine | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        pool_size: int = 2,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ) -> None:
        super().__init__()
        if database_url is None and engine is None and session_factory is None:
            raise ValueError("DatabaseSink needs a database_url, engine or session_factory")
        self._database_url = database_url
        self._engine = engine
        self._session_factory = session_factory
        self._owns_engine = False
        self._engine_kwargs: dict[str, Any] = {
            "pool_size": pool_size,
            "pool_pre_ping": pool_pre_ping,
            "echo": echo,
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> DatabaseSink:
        return cls(
            settings.async_database_url,
            pool_size=settings.db_pool_size,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.debug,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def open(self) -> None:
        if self._session_factory is not None:
            return
        if self._engine is None:
            self._engine = create_async_engine(self._database_url, **self._engine_kwargs)
            self._owns_engine = True
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            autoflush=False,
            expire_on_commit=False,
        )

    async def close(self) -> None:
        if self._owns_engine and self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
            self._owns_engine = False

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Return the active session factory.

        Raises:
            PersistenceFailure: If the sink has not been opened.
        """
        if self._session_factory is None:
            raise PersistenceFailure(
                "DatabaseSink not opened. Use 'async with sink:' context manager."
            )
        return self._session_factory

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def most_recent_reading(self) -> Reading | None:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(PizzaReading)
                    .order_by(PizzaReading.timestamp.desc())
                    .limit(1)
                )
                row = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceFailure(f"Could not read latest reading: {exc}") from exc

        if row is None:
            return None
        return Reading(
            timestamp=row.timestamp,
            index_value=float(row.index_value),
            hour_of_day=row.dc_hour,
            weekday=row.dc_weekday,
            is_overtime=bool(row.is_overtime),
            is_weekend=bool(row.is_weekend),
            raw_payload=row.raw_data,
        )

    async def count_readings(self) -> int:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(func.count()).select_from(PizzaReading)
                )
                return int(result.scalar_one())
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceFailure(f"Could not count readings: {exc}") from exc

    async def forecast(self, hour: int, weekday: int) -> Forecast:
        """Return the pattern-based forecast for a DC hour / weekday slot."""
        try:
            async with self.session_factory() as session:
                hourly = await session.get(HourlyPattern, hour)
                daily = await session.get(WeekdayPattern, weekday)
                result = await session.execute(select(func.avg(PizzaReading.index_value)))
                global_avg = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceFailure(f"Could not load patterns: {exc}") from exc

        return Forecast(
            hour=hour,
            weekday=weekday,
            hourly_forecast=_to_float(hourly.avg_index) if hourly else None,
            hourly_stddev=_to_float(hourly.std_dev) if hourly else None,
            weekday_forecast=_to_float(daily.avg_index) if daily else None,
            global_average=_to_float(global_avg),
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def append_reading(self, reading: Reading) -> None:
        stmt = pg_insert(PizzaReading).values(
            timestamp=reading.timestamp,
            index_value=_to_decimal(reading.index_value),
            dc_hour=reading.hour_of_day,
            dc_weekday=reading.weekday,
            is_overtime=reading.is_overtime,
            is_weekend=reading.is_weekend,
            raw_data=reading.raw_payload,
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(stmt)
                    await self._refresh_patterns(session, reading)
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateReading(
                    f"Reading already stored for minute "
                    f"{minute_bucket(reading.timestamp).isoformat()}"
                ) from exc
            raise PersistenceFailure(f"Reading insert rejected: {exc.orig}") from exc
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceFailure(f"Reading insert failed: {exc}") from exc

        self.log.info(
            "reading_saved",
            reading_at=reading.timestamp.isoformat(),
            index=reading.index_value,
        )

    async def append_spike(self, spike: Spike) -> None:
        stmt = pg_insert(PizzaSpike).values(
            timestamp=spike.timestamp,
            index_from=_to_decimal(spike.index_from),
            index_to=_to_decimal(spike.index_to),
            change_amount=_to_decimal(spike.change_amount),
            is_overtime=spike.is_overtime,
            is_weekend=spike.is_weekend,
            notes=spike.notes,
        )
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await session.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            raise PersistenceFailure(f"Spike insert failed: {exc}") from exc

        self.log.info("spike_saved", spike_at=spike.timestamp.isoformat())

    # ------------------------------------------------------------------
    # Aggregate patterns
    # ------------------------------------------------------------------
    async def _refresh_patterns(self, session: AsyncSession, reading: Reading) -> None:
        """Recompute the hourly and weekday rows touched by ``reading``."""
        await self._upsert_pattern(
            session, HourlyPattern, "hour", PizzaReading.dc_hour, reading.hour_of_day
        )
        await self._upsert_pattern(
            session, WeekdayPattern, "weekday", PizzaReading.dc_weekday, reading.weekday
        )

    @staticmethod
    async def _upsert_pattern(
        session: AsyncSession,
        model: type,
        key: str,
        group_column: Any,
        group_value: int,
    ) -> None:
        stats = (
            await session.execute(
                select(
                    func.avg(PizzaReading.index_value).label("avg_index"),
                    func.min(PizzaReading.index_value).label("min_index"),
                    func.max(PizzaReading.index_value).label("max_index"),
                    func.stddev(PizzaReading.index_value).label("std_dev"),
                    func.count().label("sample_count"),
                ).where(group_column == group_value)
            )
        ).one()

        values = {
            key: group_value,
            "avg_index": stats.avg_index,
            "min_index": stats.min_index,
            "max_index": stats.max_index,
            "std_dev": stats.std_dev,
            "sample_count": stats.sample_count,
            "updated_at": func.now(),
        }
        stmt = pg_insert(model).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[key],
            set_={name: stmt.excluded[name] for name in values if name != key},
        )
        await session.execute(stmt)
