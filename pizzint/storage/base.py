"""Persistence sink interface shared by every storage backend.

The pipeline talks to storage only through ReadingSink, so the same
collection algorithm runs against PostgreSQL or a flat JSON file.

Lifecycle is explicit: a sink is opened at the start of a tick and closed at
the end, preferably via ``async with``::

    async with FileSink(path) as sink:
        result = await CollectionPipeline(connector, sink).run()
"""

import abc
from typing import Any

import structlog

from pizzint.collector.domain import Reading, Spike


class ReadingSink(abc.ABC):
    """Abstract append-only store for readings and spikes.

    Subclasses MUST override:
        BACKEND: str - identifier used in log events
    """

    BACKEND: str = ""

    def __init__(self) -> None:
        self.log = structlog.get_logger().bind(backend=self.BACKEND)

    async def __aenter__(self) -> "ReadingSink":
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def open(self) -> None:
        """Acquire resources. Default: nothing to do."""

    async def close(self) -> None:
        """Release resources. Default: nothing to do."""

    @abc.abstractmethod
    async def most_recent_reading(self) -> Reading | None:
        """Return the latest stored reading by timestamp, or None if empty."""
        ...

    @abc.abstractmethod
    async def append_reading(self, reading: Reading) -> None:
        """Durably append a reading.

        Raises:
            DuplicateReading: If a reading exists for the same minute bucket.
            PersistenceFailure: If the write is rejected for any other reason.
        """
        ...

    @abc.abstractmethod
    async def append_spike(self, spike: Spike) -> None:
        """Durably append a spike. Independent of the reading write.

        Raises:
            PersistenceFailure: If the write is rejected.
        """
        ...

    @abc.abstractmethod
    async def count_readings(self) -> int:
        """Return the number of readings currently stored."""
        ...
