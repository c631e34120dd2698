"""Test basic API functionality and HTTP hardening"""
import pytest
from fastapi.testclient import TestClient

from main import app, validate_security_configuration


def test_root_endpoint(client):
    """Test root endpoint returns expected response"""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Kurasi API"
    assert data["status"] == "running"


def test_health_endpoint(client):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["test_mode"] is True
    assert data["database"] == "sqlite"


def test_security_headers_present(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "frame-ancestors 'none'" in response.headers["Content-Security-Policy"]


def test_untrusted_host_rejected(client):
    response = client.get("/health", headers={"Host": "evil.example.com"})
    assert response.status_code == 400


def test_unexpected_errors_are_generic(client, test_seller, auth_headers, monkeypatch):
    """Internal failures return a generic 500 without leaking details"""
    def _explode(self, actor, category=None):
        raise RuntimeError("connection string with password")

    monkeypatch.setattr("services.submissions.SubmissionWorkflow.pending_queue", _explode)
    safe_client = TestClient(app, raise_server_exceptions=False)

    response = safe_client.get("/api/products/pending", headers=auth_headers(test_seller))
    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error", "error": "internal"}


@pytest.mark.asyncio
async def test_startup_refuses_test_mode_in_production(monkeypatch):
    monkeypatch.setenv("TEST_MODE", "true")
    monkeypatch.setenv("ENVIRONMENT", "production")
    with pytest.raises(RuntimeError, match="TEST_MODE"):
        await validate_security_configuration()
