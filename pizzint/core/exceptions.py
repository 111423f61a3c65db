"""Exception hierarchy for the collection pipeline.

- CollectorError: base for every error raised by the collector
- UpstreamUnavailable: network or HTTP failure talking to the upstream API
- MalformedPayload: upstream response does not have the expected shape
- EmptyPayload: upstream returned no locations (mean is undefined)
- DuplicateReading: a reading already exists for the minute bucket
- PersistenceFailure: a write was rejected for any other reason

DuplicateReading is benign: the pipeline reports it as ``skipped``.
"""


class CollectorError(Exception):
    """Base exception for all collector errors."""


class UpstreamUnavailable(CollectorError):
    """Raised when the upstream API cannot be reached or returns an HTTP error."""


class MalformedPayload(CollectorError):
    """Raised when the upstream payload cannot be parsed into locations."""


class EmptyPayload(MalformedPayload):
    """Raised when the upstream payload holds zero locations."""


class DuplicateReading(CollectorError):
    """Raised when a reading for the same minute bucket is already stored."""


class PersistenceFailure(CollectorError):
    """Raised when the storage backend rejects a write or cannot be read."""
