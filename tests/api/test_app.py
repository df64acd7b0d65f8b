import pytest
from fastapi.testclient import TestClient

from fare_compare.api.app import create_app
from fare_compare.settings import APISettings, CORSSettings, Settings


@pytest.mark.unit
class TestCreateApp:
    def test_lifespan_builds_engine_from_settings(self):
        app = create_app(settings=Settings(api=APISettings(key="k")))
        assert app.state.engine is None

        with TestClient(app) as client:
            assert app.state.engine is not None
            response = client.post(
                "/comparisons",
                json={
                    "origin": {"latitude": 30.0444, "longitude": 31.2357},
                    "destination": {"latitude": 30.0626, "longitude": 31.2197},
                },
                headers={"X-API-Key": "k"},
            )

        assert response.status_code == 200
        # no driver lookup configured
        assert "independent" not in {o["provider_id"] for o in response.json()["offers"]}

    def test_cors_allows_configured_origin(self):
        settings = Settings(
            api=APISettings(key="k"), cors=CORSSettings(origins="http://app.local, http://x.local")
        )
        client = TestClient(create_app(settings=settings))

        response = client.options(
            "/comparisons",
            headers={
                "Origin": "http://app.local",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.headers["access-control-allow-origin"] == "http://app.local"
