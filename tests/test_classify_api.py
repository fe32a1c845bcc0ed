"""Tests for the classification API endpoints."""

import pytest

from quillstack.api.dependencies import (
    get_classification_log,
    get_orchestrator,
    get_section_splitter,
)
from quillstack.classification.orchestrator import ClassificationOrchestrator
from quillstack.classification.sections import SectionSplitter
from quillstack.main import app
from quillstack.stores.classification_log import ClassificationLog


@pytest.fixture(autouse=True)
def _local_deps(tmp_path):
    """Local-only pipeline with a temporary classification log."""
    orchestrator = ClassificationOrchestrator()
    log = ClassificationLog(tmp_path / "classifications.db")
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_section_splitter] = lambda: SectionSplitter(orchestrator)
    app.dependency_overrides[get_classification_log] = lambda: log
    yield log
    app.dependency_overrides.clear()
    log.close()


class TestClassifyEndpoint:
    def test_explicit_marker(self, client):
        response = client.post("/api/v1/classify", json={"text": "#todo# Buy milk"})
        assert response.status_code == 200
        data = response.json()
        assert data["result"]["type"] == "todo"
        assert data["result"]["method"] == "explicit"
        assert data["result"]["confidence"] == 1.0
        assert data["needs_review"] is False
        assert data["classification_id"] > 0

    def test_default_needs_review(self, client):
        response = client.post("/api/v1/classify", json={"text": "The weather was lovely today"})
        data = response.json()
        assert data["result"]["type"] == "general"
        assert data["result"]["method"] == "default"
        assert data["needs_review"] is True

    def test_logs_classification(self, client, _local_deps):
        client.post("/api/v1/classify", json={"text": "Remind me to call mom tonight"})
        assert _local_deps.total() == 1
        assert _local_deps.counts_by_method() == {"voiceCommand": 1}

    def test_missing_text(self, client):
        assert client.post("/api/v1/classify", json={}).status_code == 422


class TestSectionsEndpoint:
    def test_explicit_sections(self, client):
        response = client.post(
            "/api/v1/classify/sections",
            json={"text": "#todo# Buy milk\n#meeting# Standup notes"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["method"] == "explicit"
        assert data["should_auto_split"] is True
        assert [s["suggested_type"] for s in data["sections"]] == ["todo", "meeting"]
        assert data["sections"][0]["span"] == [7, 15]

    def test_single_section(self, client):
        response = client.post(
            "/api/v1/classify/sections", json={"text": "just one short note"}
        )
        data = response.json()
        assert data["method"] == "none"
        assert len(data["sections"]) == 1
        assert data["sections"][0]["content"] == "just one short note"


class TestCorrectionsEndpoint:
    def test_correct_classification(self, client, _local_deps):
        classified = client.post("/api/v1/classify", json={"text": "Lunch ideas for the week"})
        classification_id = classified.json()["classification_id"]

        response = client.post(
            "/api/v1/classify/corrections",
            json={"classification_id": classification_id, "corrected_type": "recipe"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["classification_id"] == classification_id
        assert data["result"]["type"] == "recipe"
        assert data["result"]["method"] == "manual"
        assert data["result"]["confidence"] == 1.0
        assert _local_deps.get(classification_id)["corrected_type"] == "recipe"

    def test_unknown_classification(self, client):
        response = client.post(
            "/api/v1/classify/corrections",
            json={"classification_id": 999, "corrected_type": "todo"},
        )
        assert response.status_code == 404

    def test_invalid_type(self, client):
        response = client.post(
            "/api/v1/classify/corrections",
            json={"classification_id": 1, "corrected_type": "banana"},
        )
        assert response.status_code == 422
