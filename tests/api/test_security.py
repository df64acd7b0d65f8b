"""Authentication, rate limiting and response headers."""

import pytest
from fastapi.testclient import TestClient

from fare_compare.api.app import create_app
from fare_compare.engine import FareComparisonEngine
from fare_compare.settings import APISettings, Settings


@pytest.mark.unit
class TestAuthentication:
    def test_health_needs_no_key(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_missing_key_rejected(self, test_client, comparison_body):
        response = test_client.post("/comparisons", json=comparison_body)
        assert response.status_code == 422

    def test_wrong_key_rejected(self, test_client, comparison_body):
        response = test_client.post(
            "/comparisons", json=comparison_body, headers={"X-API-Key": "nope"}
        )
        assert response.status_code == 401

    def test_unconfigured_key_is_server_error(self, comparison_body):
        app = create_app(settings=Settings(api=APISettings(key="")), engine=FareComparisonEngine())
        client = TestClient(app)

        response = client.post(
            "/comparisons", json=comparison_body, headers={"X-API-Key": "anything"}
        )

        assert response.status_code == 500


@pytest.mark.unit
class TestRateLimiting:
    def test_eleventh_clear_returns_429(self, test_client, auth_headers):
        for i in range(10):
            resp = test_client.delete("/observed-prices", headers=auth_headers)
            assert resp.status_code != 429, f"Request {i + 1} was rate limited"

        resp = test_client.delete("/observed-prices", headers=auth_headers)

        assert resp.status_code == 429
        assert resp.headers["retry-after"] == "60"

    def test_health_is_not_limited(self, test_client):
        for _ in range(100):
            assert test_client.get("/health").status_code == 200


@pytest.mark.unit
class TestSecurityHeaders:
    def test_headers_present(self, test_client):
        response = test_client.get("/health")

        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["Cache-Control"] == "no-store"
        assert "Strict-Transport-Security" in response.headers
