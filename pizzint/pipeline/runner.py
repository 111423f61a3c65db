"""Wiring between Settings and the collection pipeline.

``collect_once`` builds the connector and sink for the configured backend,
opens both for the duration of a single tick and always closes them.
``run_forever`` drives ``collect_once`` at a fixed interval until asked to
stop; ticks never overlap because each one is awaited before sleeping.
"""

from __future__ import annotations

import asyncio

import structlog

from pizzint.connectors.pizzint_api import PizzintConnector
from pizzint.core.config import Settings
from pizzint.core.config import settings as default_settings
from pizzint.core.enums import CollectionStatus
from pizzint.core.exceptions import CollectorError
from pizzint.core.utils.clock import Clock
from pizzint.pipeline.collection_pipeline import CollectionPipeline, CollectionResult
from pizzint.storage import ReadingSink, build_sink

logger = structlog.get_logger(__name__)


def build_connector(settings: Settings) -> PizzintConnector:
    return PizzintConnector(
        endpoint=settings.pizzint_api_url,
        timeout_seconds=settings.fetch_timeout_seconds,
        max_attempts=settings.fetch_max_attempts,
    )


async def collect_once(
    settings: Settings | None = None,
    *,
    clock: Clock | None = None,
    connector: PizzintConnector | None = None,
    sink: ReadingSink | None = None,
) -> CollectionResult:
    """Run a single collection tick end-to-end.

    Args:
        settings: Configuration; defaults to the process-wide settings.
        clock: Time source for the tick.
        connector: Pre-built connector (tests); built from settings if None.
        sink: Pre-built, unopened sink (tests); built from settings if None.

    Returns:
        The tick's CollectionResult. Failures to open the sink are reported
        as an ``error`` result.
    """
    settings = settings or default_settings
    connector = connector or build_connector(settings)
    sink = sink or build_sink(settings)

    try:
        async with connector, sink:
            return await CollectionPipeline(connector, sink, clock).run()
    except CollectorError as exc:
        logger.error("collection_setup_failed", error=str(exc), backend=sink.BACKEND)
        return CollectionResult(status=CollectionStatus.ERROR, error=str(exc))


async def run_forever(
    settings: Settings | None = None,
    *,
    stop_event: asyncio.Event | None = None,
    interval_seconds: float | None = None,
    clock: Clock | None = None,
) -> int:
    """Collect every ``collect_interval_minutes`` until ``stop_event`` is set.

    Unexpected exceptions from a tick are logged and the loop carries on;
    the next tick is the recovery mechanism.

    Returns:
        Number of ticks executed.
    """
    settings = settings or default_settings
    stop = stop_event or asyncio.Event()
    interval = (
        interval_seconds
        if interval_seconds is not None
        else settings.collect_interval_minutes * 60
    )

    logger.info(
        "continuous_collector_started",
        interval_seconds=interval,
        backend=settings.storage_backend.value,
    )

    ticks = 0
    while not stop.is_set():
        ticks += 1
        try:
            result = await collect_once(settings, clock=clock)
            logger.info("tick_finished", tick=ticks, result=result.to_dict())
        except Exception as exc:
            logger.exception("tick_crashed", tick=ticks, error=str(exc))

        try:
            await asyncio.wait_for(stop.wait(), timeout=interval)
        except asyncio.TimeoutError:
            pass

    logger.info("continuous_collector_stopped", ticks=ticks)
    return ticks
