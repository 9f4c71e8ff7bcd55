"""Tests for middleware components."""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from church_registry.core.middleware import (
    parse_cors_origins,
    resolve_request_id,
    setup_cors,
)
from church_registry.main import app


class TestRequestIDMiddleware:
    """Test RequestIDMiddleware."""

    def test_request_id_generated(self, client: TestClient):
        """Test that request ID is generated if not provided."""
        response = client.get("/health")

        assert response.status_code == 200
        assert "X-Request-ID" in response.headers
        assert len(response.headers["X-Request-ID"]) > 0

    def test_request_id_preserved(self, client: TestClient):
        """Test that provided request ID is preserved."""
        custom_id = "test-request-123"
        response = client.get("/health", headers={"X-Request-ID": custom_id})

        assert response.headers["X-Request-ID"] == custom_id

    def test_malformed_request_id_replaced(self, client: TestClient):
        response = client.get("/health", headers={"X-Request-ID": "bad id with spaces"})

        assert response.headers["X-Request-ID"] != "bad id with spaces"
        assert len(response.headers["X-Request-ID"]) == 32

    def test_resolve_request_id(self):
        assert resolve_request_id("abc-123.x_y") == "abc-123.x_y"
        assert resolve_request_id("x" * 65) != "x" * 65
        assert len(resolve_request_id(None)) == 32

    def test_request_id_in_error_envelope(self, client: TestClient):
        """Errors echo the request id in their body."""
        response = client.get(
            "/api/v1/members", headers={"X-Request-ID": "trace-me"}
        )

        assert response.status_code == 401
        assert response.json()["data"]["request_id"] == "trace-me"


class TestSecurityHeadersMiddleware:
    """Test SecurityHeadersMiddleware."""

    def test_security_headers_present(self, client: TestClient):
        """Test that security headers are added."""
        response = client.get("/health")

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Cache-Control" not in response.headers

    def test_api_responses_not_cached(self, client: TestClient):
        response = client.get("/api/v1/ping")

        assert response.headers["Cache-Control"] == "no-store"

    def test_hsts_not_in_dev(self, client: TestClient):
        """Test that HSTS is not added in development."""
        response = client.get("/health")

        assert "Strict-Transport-Security" not in response.headers


class TestRequestLoggingMiddleware:
    """Test RequestLoggingMiddleware."""

    def test_process_time_header(self, client: TestClient):
        response = client.get("/api/v1/auth/me")

        assert "X-Process-Time" in response.headers
        assert response.headers["X-Process-Time"].endswith("ms")

    def test_excluded_paths_skip_timing(self, client: TestClient):
        response = client.get("/api/v1/ping")

        assert response.json() == {"message": "pong"}
        assert "X-Process-Time" not in response.headers


class TestHealth:
    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.json() == {
            "status": "ok",
            "env": "dev",
            "version": app.version,
        }


class TestCors:
    def test_parse_origins(self):
        assert parse_cors_origins(" https://a.example , ,https://b.example") == [
            "https://a.example",
            "https://b.example",
        ]
        assert parse_cors_origins("") == []

    def test_no_origins_means_no_cors(self, monkeypatch):
        monkeypatch.setattr(
            "church_registry.core.middleware.settings.cors_origins", ""
        )
        bare = FastAPI()
        setup_cors(bare)

        @bare.get("/thing")
        def thing():
            return {}

        response = TestClient(bare).get(
            "/thing", headers={"Origin": "http://localhost:3000"}
        )
        assert "access-control-allow-origin" not in response.headers

    def test_configured_origin_allowed(self, monkeypatch):
        monkeypatch.setattr(
            "church_registry.core.middleware.settings.cors_origins",
            "https://registry.example",
        )
        configured = FastAPI()
        setup_cors(configured)

        @configured.get("/thing")
        def thing():
            return {}

        client = TestClient(configured)
        allowed = client.get("/thing", headers={"Origin": "https://registry.example"})
        other = client.get("/thing", headers={"Origin": "http://localhost:3000"})

        assert allowed.headers["access-control-allow-origin"] == "https://registry.example"
        assert "access-control-allow-origin" not in other.headers
