"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from quillstack.main import app
from quillstack.stores.kv import KeyValueStore


class FakeClock:
    """Settable epoch-seconds time source."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDateClock:
    """Settable UTC datetime source."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def date_clock():
    return FakeDateClock(datetime(2026, 3, 14, 12, 0, tzinfo=UTC))


@pytest.fixture
def kv_store(tmp_path):
    store = KeyValueStore(tmp_path / "state.db")
    yield store
    store.close()


@pytest.fixture
def data_dir(tmp_path):
    """Point preference reads and writes at a temporary directory."""
    with (
        patch("quillstack.api.dependencies.get_data_path", return_value=tmp_path),
        patch("quillstack.api.settings.get_data_path", return_value=tmp_path),
    ):
        yield tmp_path
