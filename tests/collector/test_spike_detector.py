"""Tests for single-step spike detection."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from pizzint.collector.spike_detector import detect_spike, is_spike


class TestIsSpike:
    @pytest.mark.parametrize(
        "index_from, index_to",
        [
            (50.0, 71.0),    # jump and regime change
            (55.0, 75.5),    # jump of 20.5 from the low-activity edge
            (10.0, 30.01),   # jump only, both low
            (54.99, 70.5),   # regime change only (change 15.51)
            (50.0, 70.01),   # just above the high-activity level
            (54.0, 71.0),
        ],
    )
    def test_flagged(self, index_from, index_to):
        assert is_spike(index_from, index_to) is True

    @pytest.mark.parametrize(
        "index_from, index_to",
        [
            (50.0, 70.0),    # change exactly 20, index_to not above 70
            (60.3, 80.3),    # change 20 after rounding, baseline not low
            (60.0, 75.0),    # high regime but baseline not low
            (55.0, 71.0),    # baseline exactly 55 is not low
            (80.0, 50.0),    # drops never count
            (60.0, 65.0),
            (45.0, 45.0),
        ],
    )
    def test_not_flagged(self, index_from, index_to):
        assert is_spike(index_from, index_to) is False


class TestDetectSpike:
    def test_first_reading_never_spikes(self, make_reading, dc_afternoon):
        assert detect_spike(None, make_reading(dc_afternoon, 99.0)) is None

    def test_spike_takes_current_reading_context(self, make_reading):
        previous_ts = datetime(2025, 1, 18, 2, 50, tzinfo=timezone.utc)
        current_ts = previous_ts + timedelta(minutes=10)
        previous = make_reading(previous_ts, 40.0)
        current = make_reading(current_ts, 72.5)

        spike = detect_spike(previous, current)

        assert spike is not None
        assert spike.timestamp == current_ts
        assert spike.index_from == 40.0
        assert spike.index_to == 72.5
        assert spike.change_amount == 32.5
        # 22:00 Friday in DC
        assert spike.is_overtime is True
        assert spike.is_weekend is False
        assert spike.notes is None

    def test_change_amount_is_rounded(self, make_reading, dc_afternoon):
        previous = make_reading(dc_afternoon, 10.1)
        current = make_reading(dc_afternoon + timedelta(minutes=10), 40.3)
        spike = detect_spike(previous, current)
        assert spike is not None
        assert spike.change_amount == 30.2

    def test_no_spike_returns_none(self, make_reading, dc_afternoon):
        previous = make_reading(dc_afternoon, 50.0)
        current = make_reading(dc_afternoon + timedelta(minutes=10), 60.0)
        assert detect_spike(previous, current) is None
