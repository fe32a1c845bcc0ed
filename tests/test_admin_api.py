"""Tests for the admin API endpoints."""

from unittest.mock import MagicMock

import pytest

from quillstack.api.dependencies import (
    get_classification_log,
    get_cost_ledger,
    get_rate_limiter,
)
from quillstack.main import app
from quillstack.models import MisclassificationPattern, NoteType
from quillstack.stores.cost import CostLedger
from quillstack.stores.rate_limit import RateLimiter


@pytest.fixture()
def ledger(kv_store, date_clock):
    return CostLedger(kv_store, daily_budget_usd=5.0, monthly_budget_usd=150.0, clock=date_clock)


@pytest.fixture()
def limiter(kv_store, clock):
    return RateLimiter(kv_store, per_minute=5, per_hour=50, per_day=200, clock=clock)


@pytest.fixture(autouse=True)
def _mock_deps(ledger, limiter):
    """Real stores on a temp database, mocked classification log."""
    mock_log = MagicMock()
    mock_log.total.return_value = 10
    mock_log.correction_rate.return_value = 0.2
    mock_log.counts_by_method.return_value = {"explicit": 6, "llm": 4}
    mock_log.misclassification_patterns.return_value = [
        MisclassificationPattern(original=NoteType.IDEA, corrected=NoteType.TODO, count=2)
    ]
    mock_log.accuracy_by_prompt_version.return_value = {"v3": 0.5}

    app.dependency_overrides[get_cost_ledger] = lambda: ledger
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_classification_log] = lambda: mock_log
    yield
    app.dependency_overrides.clear()


class TestUsageEndpoint:
    def test_empty_usage(self, client):
        response = client.get("/api/v1/admin/usage")
        assert response.status_code == 200
        data = response.json()
        assert data["usage"]["lifetime"]["calls"] == 0
        assert data["status"]["state"] == "within_budget"
        assert data["alert_message"] is None

    def test_exceeded_budget(self, client, ledger):
        ledger.record(1_000_000, 200_000)
        data = client.get("/api/v1/admin/usage").json()
        assert data["usage"]["daily"]["input_tokens"] == 1_000_000
        assert data["usage"]["daily"]["cost_usd"] == pytest.approx(6.0)
        assert data["status"]["state"] == "exceeded"
        assert data["status"]["period"] == "daily"
        assert data["alert_message"] == "Daily budget exceeded: $6.00 of $5.00"

    def test_reset(self, client, ledger):
        ledger.record(1000, 10)
        response = client.post("/api/v1/admin/usage/reset")
        assert response.status_code == 200
        assert response.json()["usage"]["lifetime"]["calls"] == 0


class TestRateLimitsEndpoint:
    def test_reports_windows(self, client, limiter):
        limiter.record_success()
        data = client.get("/api/v1/admin/rate-limits").json()
        assert set(data) == {"minute", "hour", "day"}
        assert data["minute"]["count"] == 1
        assert data["minute"]["limit"] == 5
        assert data["day"]["window_seconds"] == 86400


class TestClassificationStatsEndpoint:
    def test_stats(self, client):
        data = client.get("/api/v1/admin/classification-stats").json()
        assert data["total"] == 10
        assert data["correction_rate"] == 0.2
        assert data["by_method"] == {"explicit": 6, "llm": 4}
        assert data["misclassifications"] == [
            {"original": "idea", "corrected": "todo", "count": 2}
        ]
        assert data["accuracy_by_prompt_version"] == {"v3": 0.5}
