"""Shared enumerations.

All enums use the (str, Enum) mixin so their values serialize as plain
strings in JSON output and settings files.
"""

from enum import Enum


class CollectionStatus(str, Enum):
    """Outcome of a single collection tick."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    ERROR = "error"


class StorageBackend(str, Enum):
    """Where readings are persisted."""

    DATABASE = "database"
    FILE = "file"
