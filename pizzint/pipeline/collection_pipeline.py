"""Collection pipeline -- one complete ingestion tick.

CollectionPipeline runs the collector steps in strict sequence:

    fetch + aggregate -> classify -> duplicate guard -> spike detection
    -> persist reading -> persist spike (best effort)

The pipeline is backend-agnostic: it receives an already opened
ReadingSink and a connector, plus a Clock that is read exactly once per
tick. Every CollectorError ends the tick with an ``error`` result except
DuplicateReading, which is a ``skipped`` no-op. A failed spike write is
logged and does not affect the already committed reading.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog

from pizzint.collector.aggregator import calculate_index
from pizzint.collector.dedup import should_collect
from pizzint.collector.domain import Reading
from pizzint.collector.spike_detector import detect_spike
from pizzint.collector.time_classifier import classify
from pizzint.connectors.base import BaseConnector
from pizzint.core.enums import CollectionStatus
from pizzint.core.exceptions import CollectorError, DuplicateReading, PersistenceFailure
from pizzint.core.utils.clock import Clock, SystemClock
from pizzint.storage.base import ReadingSink

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# CollectionResult dataclass
# ---------------------------------------------------------------------------
@dataclass
class CollectionResult:
    """Outcome of one collection tick.

    Attributes:
        status: success, skipped or error.
        timestamp: Instant the tick was stamped with.
        index: Computed pizza index (None if the fetch failed).
        spike: Whether a spike was detected for this reading.
        reason: Why the tick was skipped (e.g. ``"duplicate"``).
        error: Error message for failed ticks.
        total_readings: Stored reading count after a successful write.
    """

    status: CollectionStatus
    timestamp: datetime | None = None
    index: float | None = None
    spike: bool = False
    reason: str | None = None
    error: str | None = None
    total_readings: int | None = None

    @property
    def ok(self) -> bool:
        return self.status is not CollectionStatus.ERROR

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"status": self.status.value}
        if self.timestamp is not None:
            out["timestamp"] = self.timestamp.isoformat()
        if self.status is CollectionStatus.SUCCESS:
            out["index"] = self.index
            out["spike"] = self.spike
            if self.total_readings is not None:
                out["totalReadings"] = self.total_readings
        if self.reason is not None:
            out["reason"] = self.reason
        if self.error is not None:
            out["error"] = self.error
        return out


# ---------------------------------------------------------------------------
# CollectionPipeline
# ---------------------------------------------------------------------------
class CollectionPipeline:
    """Run one ingestion tick against a connector and an open sink.

    Args:
        connector: Entered connector whose ``fetch()`` returns the location list.
        sink: Opened persistence sink.
        clock: Time source; defaults to the system clock.
    """

    def __init__(
        self,
        connector: BaseConnector,
        sink: ReadingSink,
        clock: Clock | None = None,
    ) -> None:
        self.connector = connector
        self.sink = sink
        self.clock = clock or SystemClock()

    async def run(self) -> CollectionResult:
        """Execute the tick.

        Returns:
            CollectionResult. Collector errors are folded into an
            ``error`` result rather than raised.
        """
        now = self.clock.now()
        log = logger.bind(tick_at=now.isoformat(), backend=self.sink.BACKEND)
        log.info("collection_started")

        try:
            return await self._collect(now, log)
        except CollectorError as exc:
            log.error("collection_failed", error=str(exc), error_type=type(exc).__name__)
            return CollectionResult(
                status=CollectionStatus.ERROR, timestamp=now, error=str(exc)
            )

    async def _collect(self, now: datetime, log: Any) -> CollectionResult:
        locations = await self.connector.fetch()
        index = calculate_index(locations)
        info = classify(now)
        reading = Reading.create(now, index, info, raw_payload=locations)

        log.info(
            "index_computed",
            index=reading.index_value,
            dc_hour=info.hour,
            overtime=info.is_overtime,
            weekend=info.is_weekend,
        )

        previous = await self.sink.most_recent_reading()
        if previous is not None and not should_collect(now, previous.timestamp):
            log.info("duplicate_skipped", previous=previous.timestamp.isoformat())
            return self._skipped(now)

        spike = detect_spike(previous, reading)

        try:
            await self.sink.append_reading(reading)
        except DuplicateReading as exc:
            log.info("duplicate_skipped", detail=str(exc))
            return self._skipped(now)

        if spike is not None:
            log.warning(
                "spike_detected",
                index_from=spike.index_from,
                index_to=spike.index_to,
                change=spike.change_amount,
            )
            try:
                await self.sink.append_spike(spike)
            except PersistenceFailure as exc:
                log.warning("spike_write_failed", error=str(exc))

        total: int | None = None
        try:
            total = await self.sink.count_readings()
        except PersistenceFailure as exc:
            log.warning("count_failed", error=str(exc))
        log.info("collection_complete", total_readings=total)
        return CollectionResult(
            status=CollectionStatus.SUCCESS,
            timestamp=now,
            index=reading.index_value,
            spike=spike is not None,
            total_readings=total,
        )

    @staticmethod
    def _skipped(now: datetime) -> CollectionResult:
        return CollectionResult(
            status=CollectionStatus.SKIPPED, timestamp=now, reason="duplicate"
        )
