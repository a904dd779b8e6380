"""Tests for HTTP error logging middleware."""

import io
import logging
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from dualstore.api.v1.routes_upload import get_upload_orchestrator
from dualstore.main import app
from dualstore.upload.exceptions import IoError
from dualstore.upload.orchestrator import UploadOrchestrator


@pytest.fixture
def client():
    """Create test client."""
    yield TestClient(app)
    app.dependency_overrides.clear()


def _records(caplog, message):
    return [r for r in caplog.records if r.getMessage() == message]


def test_client_error_logged_as_warning(client, caplog):
    with caplog.at_level(logging.WARNING, logger="dualstore.api.middleware"):
        response = client.post("/upload", json={"file": "hello"})

    assert response.status_code == 400
    [record] = _records(caplog, "Client error response")
    assert record.levelno == logging.WARNING
    assert record.http_status == 400
    assert record.method == "POST"
    assert record.path == "/upload"


def test_server_error_logged_as_error(client, caplog):
    orchestrator = AsyncMock(spec=UploadOrchestrator)
    orchestrator.handle_upload.side_effect = IoError("disk full")
    app.dependency_overrides[get_upload_orchestrator] = lambda: orchestrator
    files = {"file": ("hello.txt", io.BytesIO(b"0123456789"), "text/plain")}

    with caplog.at_level(logging.WARNING, logger="dualstore.api.middleware"):
        response = client.post("/upload", files=files)

    assert response.status_code == 500
    [record] = _records(caplog, "Server error response")
    assert record.levelno == logging.ERROR
    assert record.content_length is not None


def test_success_not_logged(client, caplog):
    with caplog.at_level(logging.WARNING, logger="dualstore.api.middleware"):
        response = client.get("/health")

    assert response.status_code == 200
    assert _records(caplog, "Client error response") == []
    assert _records(caplog, "Server error response") == []
