"""Single-step spike detection between consecutive readings.

A transition is a spike iff the index jumps by more than 20 points, or it
crosses from a low-activity baseline (< 55) into the high-activity regime
(> 70). There is no smoothing or trend: only the previous reading counts.
"""

from __future__ import annotations

from pizzint.collector.domain import Reading, Spike

JUMP_THRESHOLD = 20.0
HIGH_ACTIVITY_LEVEL = 70.0
LOW_ACTIVITY_LEVEL = 55.0


def is_spike(index_from: float, index_to: float) -> bool:
    # Values are stored with 2 decimals; round the delta so 70.3 - 50.3 is 20.
    change = round(index_to - index_from, 2)
    return change > JUMP_THRESHOLD or (
        index_to > HIGH_ACTIVITY_LEVEL and index_from < LOW_ACTIVITY_LEVEL
    )


def detect_spike(previous: Reading | None, current: Reading) -> Spike | None:
    """Compare ``current`` with ``previous`` and return a Spike if flagged.

    Args:
        previous: Most recent stored reading, or None on the first tick.
        current: The reading about to be persisted.

    Returns:
        A Spike stamped with the current reading's time and flags, or None.
    """
    if previous is None:
        return None

    index_from = previous.index_value
    index_to = current.index_value
    if not is_spike(index_from, index_to):
        return None

    return Spike(
        timestamp=current.timestamp,
        index_from=index_from,
        index_to=index_to,
        change_amount=round(index_to - index_from, 2),
        is_overtime=current.is_overtime,
        is_weekend=current.is_weekend,
    )
