"""Tests for health and root endpoints."""

from unittest.mock import MagicMock, patch

from httpx import ASGITransport, AsyncClient

from quillstack.main import app


def _settings(tmp_path, credential_configured=True):
    mock_s = MagicMock()
    mock_s.data_path = tmp_path
    mock_s.credential_configured = credential_configured
    return mock_s


async def test_health_returns_ok(tmp_path):
    """Test that /health returns status ok with a credential and free disk."""
    with (
        patch("quillstack.main.get_settings", return_value=_settings(tmp_path)),
        patch("quillstack.main.shutil.disk_usage", return_value=(0, 0, 50 * 1024**3)),
    ):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["remote_classification"] == "ok"
    assert data["free_disk_gb"] == 50.0


async def test_health_reports_missing_credential(tmp_path):
    with (
        patch("quillstack.main.get_settings", return_value=_settings(tmp_path, False)),
        patch("quillstack.main.shutil.disk_usage", return_value=(0, 0, 50 * 1024**3)),
    ):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/v1/health")

    data = response.json()
    assert data["status"] == "ok"
    assert data["remote_classification"] == "no credential"


async def test_health_warns_on_low_disk(tmp_path):
    with (
        patch("quillstack.main.get_settings", return_value=_settings(tmp_path)),
        patch("quillstack.main.shutil.disk_usage", return_value=(0, 0, 512 * 1024**2)),
    ):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")

    data = response.json()
    assert data["status"] == "warning"
    assert data["disk"] == "low"


async def test_root_returns_project_info():
    """Test that / returns project information."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "QuillStack"
    assert "version" in data
    assert "description" in data
