"""Tests for backend selection."""

from __future__ import annotations

from pizzint.core.config import Settings
from pizzint.core.enums import StorageBackend
from pizzint.storage import DatabaseSink, FileSink, build_sink


class TestBuildSink:
    def test_file_backend(self, tmp_path):
        settings = Settings(
            _env_file=None,
            storage_backend="file",
            data_file=tmp_path / "r.json",
            max_file_readings=500,
        )
        sink = build_sink(settings)
        assert isinstance(sink, FileSink)
        assert sink.path == tmp_path / "r.json"
        assert sink.max_readings == 500
        assert sink.max_spikes == 100

    def test_database_backend(self):
        sink = build_sink(Settings(_env_file=None, storage_backend="database"))
        assert isinstance(sink, DatabaseSink)

    def test_explicit_backend_wins(self, tmp_path):
        settings = Settings(_env_file=None, storage_backend="database", data_file=tmp_path / "r.json")
        assert isinstance(build_sink(settings, StorageBackend.FILE), FileSink)
