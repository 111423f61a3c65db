"""Flat JSON file persistence sink.

The whole dataset lives in one document::

    {"readings": [...], "spikes": [...], "lastUpdate": "<ISO timestamp>"}

open() loads it fully into memory. Every append builds the next version of
the document, rewrites the file atomically (temp file + os.replace) and only
then swaps it into memory, so a failed write leaves both the file and the
in-memory state untouched.

Retention: after an append, only the most recent ``max_readings`` readings
and ``max_spikes`` spikes are kept (oldest evicted first).

Single writer only. Two overlapping ticks would each rewrite the whole
file and the last one wins; the scheduler must not overlap runs.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any

from pizzint.collector.dedup import minute_bucket
from pizzint.collector.domain import Reading, Spike, parse_timestamp
from pizzint.core.config import Settings
from pizzint.core.exceptions import DuplicateReading, PersistenceFailure
from pizzint.storage.base import ReadingSink

DEFAULT_MAX_READINGS = 10_000
DEFAULT_MAX_SPIKES = 100


def empty_document() -> dict[str, Any]:
    return {"readings": [], "spikes": [], "lastUpdate": None}


class FileSink(ReadingSink):
    """Persist readings and spikes to a JSON document on disk.

    Usage::

        async with FileSink(Path("data/readings.json")) as sink:
            await sink.append_reading(reading)
    """

    BACKEND: str = "file"

    def __init__(
        self,
        path: Path | str,
        max_readings: int = DEFAULT_MAX_READINGS,
        max_spikes: int = DEFAULT_MAX_SPIKES,
    ) -> None:
        super().__init__()
        if max_readings < 1 or max_spikes < 1:
            raise ValueError("FileSink retention limits must be positive")
        self.path = Path(path)
        self.max_readings = max_readings
        self.max_spikes = max_spikes
        self._doc: dict[str, Any] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> FileSink:
        return cls(
            settings.data_file,
            max_readings=settings.max_file_readings,
            max_spikes=settings.max_file_spikes,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def open(self) -> None:
        self._doc = await asyncio.to_thread(self._load)

    async def close(self) -> None:
        self._doc = None

    @property
    def document(self) -> dict[str, Any]:
        """Return the in-memory document.

        Raises:
            PersistenceFailure: If the sink has not been opened.
        """
        if self._doc is None:
            raise PersistenceFailure(
                "FileSink not opened. Use 'async with sink:' context manager."
            )
        return self._doc

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            self.log.info("data_file_created", path=str(self.path))
            return empty_document()

        try:
            doc = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceFailure(f"Cannot read data file {self.path}: {exc}") from exc

        if not isinstance(doc, dict):
            raise PersistenceFailure(f"Data file {self.path} is not a JSON object")
        doc.setdefault("readings", [])
        doc.setdefault("spikes", [])
        doc.setdefault("lastUpdate", None)
        if not isinstance(doc["readings"], list) or not isinstance(doc["spikes"], list):
            raise PersistenceFailure(
                f"Data file {self.path} must hold 'readings' and 'spikes' lists"
            )

        self.log.info("data_file_loaded", path=str(self.path), readings=len(doc["readings"]))
        return doc

    def _write(self, doc: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            payload = json.dumps(doc, indent=2, allow_nan=False) + "\n"
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self.path)
        except (OSError, ValueError) as exc:
            raise PersistenceFailure(f"Cannot write data file {self.path}: {exc}") from exc

    async def _commit(self, doc: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write, doc)
        self._doc = doc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def most_recent_reading(self) -> Reading | None:
        readings = self.document["readings"]
        if not readings:
            return None
        try:
            return Reading.from_record(readings[-1])
        except (KeyError, TypeError, ValueError) as exc:
            raise PersistenceFailure(f"Corrupt last reading in {self.path}: {exc}") from exc

    async def count_readings(self) -> int:
        return len(self.document["readings"])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def append_reading(self, reading: Reading) -> None:
        current = self.document
        bucket = minute_bucket(reading.timestamp)
        for record in reversed(current["readings"]):
            try:
                stored_at = parse_timestamp(record["timestamp"])
            except (KeyError, TypeError, ValueError) as exc:
                raise PersistenceFailure(
                    f"Reading without a valid timestamp in {self.path}: {exc}"
                ) from exc
            if minute_bucket(stored_at) == bucket:
                raise DuplicateReading(
                    f"Reading already stored for minute {bucket.isoformat()}"
                )

        readings = current["readings"] + [reading.to_record()]
        trimmed = max(0, len(readings) - self.max_readings)
        if trimmed:
            readings = readings[-self.max_readings:]

        record = readings[-1]
        await self._commit({**current, "readings": readings, "lastUpdate": record["timestamp"]})

        if trimmed:
            self.log.info("readings_trimmed", removed=trimmed, kept=len(readings))
        self.log.info(
            "reading_saved",
            reading_at=record["timestamp"],
            index=reading.index_value,
            total=len(readings),
        )

    async def append_spike(self, spike: Spike) -> None:
        current = self.document
        spikes = (current["spikes"] + [spike.to_record()])[-self.max_spikes:]
        await self._commit({**current, "spikes": spikes})
        self.log.info("spike_saved", spike_at=spike.to_record()["timestamp"])
