import json

import httpx
import pytest
import respx
from httpx import Response

from fare_compare.collaborators import (
    PLACEHOLDER_DRIVERS,
    DriverLookupResult,
    HttpNearbyDriverLookup,
    StaticDriverLookup,
    row_to_candidate,
)
from fare_compare.core.exceptions import DriverLookupError
from fare_compare.core.retry import RetryConfig
from tests.factories import TAHRIR, make_candidate

BASE_URL = "http://drivers.local"
RPC_URL = f"{BASE_URL}/rest/v1/rpc/find_nearby_drivers"


@pytest.fixture
def lookup() -> HttpNearbyDriverLookup:
    return HttpNearbyDriverLookup(
        BASE_URL, "secret-key", timeout=1.0, retry_config=RetryConfig(max_attempts=2, base_delay=0)
    )


def driver_row(**overrides) -> dict:
    row = {
        "driver_id": "d-77",
        "name": "Omar Said",
        "whatsapp_number": "+201112223334",
        "rating": 4.6,
        "total_rides": 95,
        "distance_km": 1.8,
        "vehicle_type": "car",
        "vehicle_make": "Nissan",
        "vehicle_model": "Sunny",
        "vehicle_color": "grey",
    }
    row.update(overrides)
    return row


@pytest.mark.unit
class TestRowToCandidate:
    def test_rpc_row(self):
        candidate = row_to_candidate(driver_row())

        assert candidate.id == "d-77"
        assert candidate.phone == "+201112223334"
        assert candidate.distance_km == 1.8
        assert candidate.vehicle_info == "Nissan Sunny"

    def test_nested_vehicle_row(self):
        row = {
            "id": "d-9",
            "name": "Hany",
            "phone": "+201000000009",
            "vehicles": [{"type": "car", "make": "Skoda", "model": "Octavia", "color": "blue"}],
        }

        candidate = row_to_candidate(row)

        assert candidate.vehicle_info == "Skoda Octavia"
        assert candidate.vehicle_color == "blue"
        assert candidate.rating == 5.0

    def test_vehicle_info_falls_back_to_type(self):
        assert make_candidate(vehicle_make=None, vehicle_type="motorcycle").vehicle_info == (
            "motorcycle"
        )


@pytest.mark.unit
class TestDriverLookupResult:
    def test_ok(self):
        result = DriverLookupResult.ok([make_candidate()])
        assert not result.failed
        assert len(result.candidates) == 1

    def test_failure(self):
        result = DriverLookupResult.failure("timed out")
        assert result.failed
        assert result.candidates == ()
        assert result.error == "timed out"


@pytest.mark.unit
class TestStaticDriverLookup:
    async def test_filters_by_radius(self):
        near = make_candidate(id="near", distance_km=1.0)
        far = make_candidate(id="far", distance_km=9.0)

        found = await StaticDriverLookup([near, far]).find_nearby_drivers(TAHRIR, 5.0)

        assert [c.id for c in found] == ["near"]

    def test_placeholders_are_fixed(self):
        assert [c.vehicle_info for c in PLACEHOLDER_DRIVERS] == [
            "Toyota Corolla",
            "Hyundai Elantra",
        ]


@pytest.mark.unit
class TestHttpNearbyDriverLookup:
    async def test_calls_rpc(self, lookup):
        async with respx.mock:
            route = respx.post(RPC_URL).mock(return_value=Response(200, json=[driver_row()]))

            candidates = await lookup.find_nearby_drivers(TAHRIR, 5.0)

        assert [c.id for c in candidates] == ["d-77"]
        request = route.calls.last.request
        assert request.headers["apikey"] == "secret-key"
        assert request.headers["Authorization"] == "Bearer secret-key"
        assert json.loads(request.content) == {
            "user_location": "POINT(31.2357 30.0444)",
            "radius_km": 5.0,
            "service_type": "rides",
        }

    async def test_null_response_is_empty(self, lookup):
        async with respx.mock:
            respx.post(RPC_URL).mock(
                return_value=Response(
                    200, content=b"null", headers={"Content-Type": "application/json"}
                )
            )

            assert await lookup.find_nearby_drivers(TAHRIR, 5.0) == []

    async def test_skips_malformed_rows(self, lookup):
        async with respx.mock:
            respx.post(RPC_URL).mock(
                return_value=Response(200, json=[{"name": "no id"}, driver_row()])
            )

            candidates = await lookup.find_nearby_drivers(TAHRIR, 5.0)

        assert [c.id for c in candidates] == ["d-77"]

    async def test_retries_then_raises(self, lookup):
        async with respx.mock:
            route = respx.post(RPC_URL).mock(return_value=Response(503))

            with pytest.raises(DriverLookupError):
                await lookup.find_nearby_drivers(TAHRIR, 5.0)

        assert route.call_count == 2

    async def test_recovers_after_network_blip(self, lookup):
        async with respx.mock:
            respx.post(RPC_URL).mock(
                side_effect=[httpx.ConnectError("reset"), Response(200, json=[driver_row()])]
            )

            candidates = await lookup.find_nearby_drivers(TAHRIR, 5.0)

        assert len(candidates) == 1

    async def test_protocol_error_raises_lookup_error(self, lookup):
        async with respx.mock:
            respx.post(RPC_URL).mock(side_effect=httpx.RemoteProtocolError("peer closed"))

            with pytest.raises(DriverLookupError):
                await lookup.find_nearby_drivers(TAHRIR, 5.0)
