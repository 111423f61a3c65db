"""Pure decision logic of the collector.

Time classification, index aggregation, the minute-bucket duplicate guard
and spike detection. Nothing in this package performs I/O.
"""

from pizzint.collector.aggregator import calculate_index, parse_payload
from pizzint.collector.dedup import minute_bucket, should_collect
from pizzint.collector.domain import Reading, Spike, TimeInfo
from pizzint.collector.spike_detector import detect_spike, is_spike
from pizzint.collector.time_classifier import DC_TZ, classify

__all__ = [
    "DC_TZ",
    "Reading",
    "Spike",
    "TimeInfo",
    "calculate_index",
    "classify",
    "detect_spike",
    "is_spike",
    "minute_bucket",
    "parse_payload",
    "should_collect",
]
