from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from fare_compare.api.app import create_app
from fare_compare.collaborators import StaticDriverLookup
from fare_compare.engine import FareComparisonEngine
from fare_compare.settings import APISettings, Settings
from tests.factories import make_candidate

API_KEY = "test-api-key"


@pytest.fixture
def mock_capture() -> AsyncMock:
    capture = AsyncMock()
    capture.get_latest_observed_prices.return_value = []
    return capture


@pytest.fixture
def engine(mock_capture) -> FareComparisonEngine:
    return FareComparisonEngine(
        capture=mock_capture,
        driver_lookup=StaticDriverLookup([make_candidate()]),
    )


@pytest.fixture
def test_app(engine) -> FastAPI:
    return create_app(settings=Settings(api=APISettings(key=API_KEY)), engine=engine)


@pytest.fixture
def test_client(test_app) -> TestClient:
    return TestClient(test_app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"X-API-Key": API_KEY}


@pytest.fixture
def comparison_body() -> dict:
    return {
        "origin": {"latitude": 30.0444, "longitude": 31.2357},
        "destination": {"latitude": 30.0626, "longitude": 31.2197},
        "origin_address": "Tahrir Square",
        "destination_address": "Zamalek",
        "requested_at": "2024-06-03T10:00:00+03:00",
    }
