"""Persistence sinks.

Re-exports the ReadingSink ABC, both backends, and ``build_sink`` which
picks the backend named by ``Settings.storage_backend``.
"""

from pizzint.core.config import Settings
from pizzint.core.enums import StorageBackend

from .base import ReadingSink
from .database import DatabaseSink
from .file import FileSink


def build_sink(settings: Settings, backend: StorageBackend | None = None) -> ReadingSink:
    """Construct (but do not open) the sink for the configured backend."""
    backend = StorageBackend(backend or settings.storage_backend)
    if backend is StorageBackend.FILE:
        return FileSink.from_settings(settings)
    return DatabaseSink.from_settings(settings)


__all__ = [
    "DatabaseSink",
    "FileSink",
    "ReadingSink",
    "build_sink",
]
