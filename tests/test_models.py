from datetime import UTC, datetime

import pydantic
import pytest

from fare_compare.core.exceptions import IncompleteTripRequestError, InvalidLocationError
from fare_compare.models import (
    DataQuality,
    Location,
    ProviderId,
    SortPolicy,
    build_trip_request,
)
from tests.factories import MONDAY_10AM, TAHRIR, ZAMALEK, make_quote


@pytest.mark.unit
class TestBuildTripRequest:
    def test_accepts_locations_tuples_and_mappings(self):
        trip = build_trip_request(
            (30.0444, 31.2357), {"latitude": 30.0626, "longitude": 31.2197}, MONDAY_10AM
        )

        assert trip.origin == TAHRIR
        assert trip.destination == ZAMALEK
        assert trip.requested_at == MONDAY_10AM

    def test_defaults_requested_at_to_now(self):
        before = datetime.now(UTC)
        trip = build_trip_request(TAHRIR, ZAMALEK)
        assert trip.requested_at >= before

    @pytest.mark.parametrize(
        "origin,destination,missing",
        [
            (None, ZAMALEK, ["origin"]),
            (TAHRIR, None, ["destination"]),
            (None, None, ["origin", "destination"]),
        ],
    )
    def test_missing_endpoint(self, origin, destination, missing):
        with pytest.raises(IncompleteTripRequestError) as exc_info:
            build_trip_request(origin, destination)

        assert exc_info.value.details["missing"] == missing

    @pytest.mark.parametrize(
        "origin",
        [(91.0, 31.0), (30.0, -181.0), (float("nan"), 31.0), {"latitude": 30.0}, (1.0,)],
    )
    def test_invalid_coordinates(self, origin):
        with pytest.raises(InvalidLocationError) as exc_info:
            build_trip_request(origin, ZAMALEK)

        assert exc_info.value.details["role"] == "origin"

    def test_location_is_immutable(self):
        with pytest.raises(pydantic.ValidationError):
            TAHRIR.latitude = 0.0  # type: ignore[misc]


@pytest.mark.unit
class TestSortPolicy:
    @pytest.mark.parametrize("value", ["lowest_price", "best_service", "fastest_arrival"])
    def test_parse_known(self, value):
        assert SortPolicy.parse(value).value == value

    @pytest.mark.parametrize("value", [None, "", "cheapest", "LOWEST_PRICE"])
    def test_parse_unknown_defaults_to_lowest_price(self, value):
        assert SortPolicy.parse(value) is SortPolicy.LOWEST_PRICE


@pytest.mark.unit
class TestFareQuote:
    def test_surge_flags(self):
        assert not make_quote(surge_multiplier=1.05).has_surge
        quote = make_quote(surge_multiplier=1.35)
        assert quote.has_surge
        assert quote.surge_percent == 35

    def test_surge_fields_are_serialized(self):
        data = make_quote(surge_multiplier=1.25).model_dump()
        assert data["has_surge"] is True
        assert data["surge_percent"] == 25

    def test_rejects_negative_price(self):
        with pytest.raises(pydantic.ValidationError):
            make_quote(price=-1.0)

    def test_display_names(self):
        assert ProviderId.INDEPENDENT.display_name == "GO-ON"
        assert ProviderId.DIDI.display_name == "DiDi"


@pytest.mark.unit
def test_data_quality_degraded():
    assert not DataQuality().is_degraded
    assert not DataQuality(drivers="none").is_degraded
    assert DataQuality(drivers="placeholder").is_degraded
    assert DataQuality(observed_prices="unavailable").is_degraded


@pytest.mark.unit
def test_location_tuple():
    assert Location(latitude=1.5, longitude=2.5).as_tuple() == (1.5, 2.5)


@pytest.mark.unit
def test_data_quality_serializes_degraded_flag():
    assert DataQuality(drivers="placeholder").model_dump() == {
        "drivers": "placeholder",
        "observed_prices": "live",
        "is_degraded": True,
    }
