"""Tests for FileSink.

Verifies the document layout, minute-bucket uniqueness across all retained
readings, retention windows and failure handling. Uses pytest's tmp_path.
"""

from __future__ import annotations

import json
import math
from datetime import datetime, timedelta, timezone

import pytest

from pizzint.collector.domain import Spike
from pizzint.core.exceptions import DuplicateReading, PersistenceFailure
from pizzint.storage.file import FileSink


def _reading_record(ts: datetime, index_value: float = 50.0) -> dict:
    return {
        "timestamp": ts.isoformat(timespec="seconds"),
        "index_value": index_value,
        "dc_hour": 14,
        "dc_weekday": 3,
        "is_overtime": False,
        "is_weekend": False,
    }


def _seed(path, readings=(), spikes=()) -> None:
    path.write_text(
        json.dumps({"readings": list(readings), "spikes": list(spikes), "lastUpdate": None}),
        encoding="utf-8",
    )


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data" / "readings.json"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestOpen:
    @pytest.mark.asyncio
    async def test_missing_file_starts_empty(self, data_file):
        async with FileSink(data_file) as sink:
            assert await sink.most_recent_reading() is None
            assert await sink.count_readings() == 0
        assert not data_file.exists()

    @pytest.mark.asyncio
    async def test_invalid_json_fails(self, tmp_path):
        path = tmp_path / "readings.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceFailure):
            async with FileSink(path):
                pass

    @pytest.mark.asyncio
    async def test_wrong_shape_fails(self, tmp_path):
        path = tmp_path / "readings.json"
        path.write_text(json.dumps({"readings": {}, "spikes": []}), encoding="utf-8")
        with pytest.raises(PersistenceFailure, match="lists"):
            async with FileSink(path):
                pass

    @pytest.mark.asyncio
    async def test_not_opened(self, data_file):
        with pytest.raises(PersistenceFailure, match="not opened"):
            await FileSink(data_file).count_readings()


# ---------------------------------------------------------------------------
# Appending readings
# ---------------------------------------------------------------------------


class TestAppendReading:
    @pytest.mark.asyncio
    async def test_append_persists_document(self, data_file, make_reading, dc_afternoon):
        reading = make_reading(dc_afternoon, 50.0, raw_payload=[{"current_popularity": 50}])
        async with FileSink(data_file) as sink:
            await sink.append_reading(reading)
            assert await sink.count_readings() == 1

        doc = json.loads(data_file.read_text(encoding="utf-8"))
        assert doc["readings"] == [
            {
                "timestamp": "2025-01-15T19:00:00+00:00",
                "index_value": 50.0,
                "dc_hour": 14,
                "dc_weekday": 3,
                "is_overtime": False,
                "is_weekend": False,
            }
        ]
        assert doc["spikes"] == []
        assert doc["lastUpdate"] == "2025-01-15T19:00:00+00:00"

    @pytest.mark.asyncio
    async def test_reopen_returns_latest(self, data_file, make_reading, dc_afternoon):
        async with FileSink(data_file) as sink:
            await sink.append_reading(make_reading(dc_afternoon, 40.0))
            await sink.append_reading(make_reading(dc_afternoon + timedelta(minutes=10), 45.5))

        async with FileSink(data_file) as sink:
            latest = await sink.most_recent_reading()

        assert latest is not None
        assert latest.index_value == 45.5
        assert latest.timestamp == dc_afternoon + timedelta(minutes=10)

    @pytest.mark.asyncio
    async def test_same_minute_is_duplicate(self, data_file, make_reading, dc_afternoon):
        async with FileSink(data_file) as sink:
            await sink.append_reading(make_reading(dc_afternoon, 40.0))
            before = data_file.read_text(encoding="utf-8")
            with pytest.raises(DuplicateReading):
                await sink.append_reading(
                    make_reading(dc_afternoon + timedelta(seconds=30), 41.0)
                )
            assert await sink.count_readings() == 1
        assert data_file.read_text(encoding="utf-8") == before

    @pytest.mark.asyncio
    async def test_duplicate_of_older_reading(self, data_file, make_reading, dc_afternoon):
        """Uniqueness holds for every retained reading, not only the last one."""
        data_file.parent.mkdir(parents=True)
        _seed(
            data_file,
            readings=[
                _reading_record(dc_afternoon),
                _reading_record(dc_afternoon + timedelta(minutes=10)),
            ],
        )
        async with FileSink(data_file) as sink:
            with pytest.raises(DuplicateReading):
                await sink.append_reading(
                    make_reading(dc_afternoon + timedelta(seconds=45), 60.0)
                )

    @pytest.mark.asyncio
    async def test_older_record_missing_fields_does_not_block(
        self, data_file, make_reading, dc_afternoon
    ):
        data_file.parent.mkdir(parents=True)
        legacy = {"timestamp": "2025-01-15T18:00:00+00:00", "index_value": 30.0}
        _seed(data_file, readings=[legacy, _reading_record(dc_afternoon)])

        async with FileSink(data_file) as sink:
            await sink.append_reading(make_reading(dc_afternoon + timedelta(minutes=10), 55.0))
            with pytest.raises(DuplicateReading):
                await sink.append_reading(
                    make_reading(datetime(2025, 1, 15, 18, 0, 20, tzinfo=timezone.utc), 31.0)
                )
            assert await sink.count_readings() == 3

    @pytest.mark.asyncio
    async def test_record_without_timestamp_fails(self, data_file, make_reading, dc_afternoon):
        data_file.parent.mkdir(parents=True)
        _seed(data_file, readings=[{"index_value": 30.0}, _reading_record(dc_afternoon)])

        async with FileSink(data_file) as sink:
            with pytest.raises(PersistenceFailure, match="timestamp"):
                await sink.append_reading(
                    make_reading(dc_afternoon + timedelta(minutes=10), 55.0)
                )

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [math.nan, math.inf])
    async def test_non_finite_index_never_written(
        self, data_file, make_reading, dc_afternoon, value
    ):
        async with FileSink(data_file) as sink:
            await sink.append_reading(make_reading(dc_afternoon, 50.0))
            before = data_file.read_text(encoding="utf-8")
            with pytest.raises(PersistenceFailure):
                await sink.append_reading(
                    make_reading(dc_afternoon + timedelta(minutes=10), value)
                )
            assert await sink.count_readings() == 1

        assert data_file.read_text(encoding="utf-8") == before
        json.loads(before)

    @pytest.mark.parametrize("limits", [{"max_readings": 0}, {"max_spikes": 0}])
    def test_retention_limits_must_be_positive(self, data_file, limits):
        with pytest.raises(ValueError):
            FileSink(data_file, **limits)

    @pytest.mark.asyncio
    async def test_retention_keeps_most_recent(self, tmp_path, make_reading):
        path = tmp_path / "readings.json"
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        _seed(path, readings=[_reading_record(start + timedelta(minutes=i)) for i in range(10_000)])
        newest = start + timedelta(minutes=20_000)

        async with FileSink(path) as sink:
            await sink.append_reading(make_reading(newest, 77.0))
            assert await sink.count_readings() == 10_000

        doc = json.loads(path.read_text(encoding="utf-8"))
        assert len(doc["readings"]) == 10_000
        assert doc["readings"][0]["timestamp"] == _reading_record(start + timedelta(minutes=1))["timestamp"]
        assert doc["readings"][-1]["index_value"] == 77.0

    @pytest.mark.asyncio
    async def test_custom_retention(self, data_file, make_reading, dc_afternoon):
        async with FileSink(data_file, max_readings=2) as sink:
            for i in range(3):
                await sink.append_reading(make_reading(dc_afternoon + timedelta(minutes=i), i))
            assert await sink.count_readings() == 2
            assert (await sink.most_recent_reading()).index_value == 2.0

    @pytest.mark.asyncio
    async def test_write_failure_leaves_state_untouched(self, tmp_path, make_reading, dc_afternoon):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")

        async with FileSink(blocker / "readings.json") as sink:
            with pytest.raises(PersistenceFailure):
                await sink.append_reading(make_reading(dc_afternoon, 50.0))
            assert await sink.count_readings() == 0


# ---------------------------------------------------------------------------
# Appending spikes
# ---------------------------------------------------------------------------


class TestAppendSpike:
    @pytest.mark.asyncio
    async def test_append_spike(self, data_file, dc_afternoon):
        spike = Spike(dc_afternoon, 40.0, 72.0, 32.0, False, False)
        async with FileSink(data_file) as sink:
            await sink.append_spike(spike)

        doc = json.loads(data_file.read_text(encoding="utf-8"))
        assert doc["spikes"] == [
            {
                "timestamp": "2025-01-15T19:00:00+00:00",
                "index_from": 40.0,
                "index_to": 72.0,
                "change_amount": 32.0,
                "is_overtime": False,
                "is_weekend": False,
            }
        ]

    @pytest.mark.asyncio
    async def test_spike_retention(self, tmp_path, dc_afternoon):
        path = tmp_path / "readings.json"
        old = [
            Spike(dc_afternoon - timedelta(hours=i + 1), 10.0, 40.0, 30.0, False, False).to_record()
            for i in range(100)
        ]
        _seed(path, spikes=old)

        async with FileSink(path) as sink:
            await sink.append_spike(Spike(dc_afternoon, 40.0, 90.0, 50.0, False, False))

        doc = json.loads(path.read_text(encoding="utf-8"))
        assert len(doc["spikes"]) == 100
        assert doc["spikes"][0] == old[1]
        assert doc["spikes"][-1]["index_to"] == 90.0
