"""Root pytest configuration and shared fixtures.

Provides common test fixtures used across all test modules:
- load_fixture: callable to load JSON fixtures from tests/fixtures/
- dc_afternoon: 2025-01-15 19:00 UTC (Wednesday 14:00 in Washington)
- fixed_clock: FixedClock frozen at dc_afternoon
- make_reading: factory for classified Reading objects

structlog configuration is reset after every test so that one test
configuring logging never leaks into the next.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import pytest

from pizzint.collector.domain import Reading
from pizzint.collector.time_classifier import classify
from pizzint.core.utils.clock import FixedClock
from pizzint.core.utils.logging_config import reset_logging

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    reset_logging()


@pytest.fixture
def load_fixture() -> Any:
    """Return a callable that loads JSON fixtures from tests/fixtures/.

    Usage::

        def test_something(load_fixture):
            data = load_fixture("pizzint_sample.json")
    """
    def _load(filename: str) -> Any:
        filepath = FIXTURES_DIR / filename
        with filepath.open("r", encoding="utf-8") as f:
            return json.load(f)
    return _load


@pytest.fixture
def dc_afternoon() -> datetime:
    return datetime(2025, 1, 15, 19, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock(dc_afternoon: datetime) -> FixedClock:
    return FixedClock(dc_afternoon)


@pytest.fixture
def make_reading() -> Callable[..., Reading]:
    """Return a factory building a Reading classified from its timestamp."""
    def _make(ts: datetime, index_value: float, raw_payload: Any = None) -> Reading:
        return Reading.create(ts, index_value, classify(ts), raw_payload=raw_payload)
    return _make
