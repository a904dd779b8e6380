"""Tests for the health check endpoint."""

from fastapi.testclient import TestClient

from dualstore.core.config import settings
from dualstore.main import app

client = TestClient(app)


def test_health_endpoint():
    """Test that the health endpoint returns correct response."""
    response = client.get("/health")

    assert response.status_code == 200

    data = response.json()
    assert "status" in data
    assert "service" in data
    assert "version" in data
    assert data["status"] == "ok"


def test_health_endpoint_values():
    """Test that the health endpoint returns expected values."""
    response = client.get("/health")

    data = response.json()
    assert data["service"] == "dualstore"
    assert data["version"] == "0.1.0"
    assert data["storage_backend"] in ("local", "remote")


def test_startup_creates_temp_dir(tmp_path, monkeypatch):
    """Entering the app lifespan creates the transient directory."""
    temp_dir = tmp_path / "transient" / "uploads"
    monkeypatch.setattr(settings, "TEMP_DIR", str(temp_dir))

    with TestClient(app) as started:
        assert temp_dir.is_dir()
        assert started.get("/health").status_code == 200
