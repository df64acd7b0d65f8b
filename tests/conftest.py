import pytest

from fare_compare.api.rate_limit import limiter
from fare_compare.models import DriverCandidate, TripRequest, build_trip_request
from tests.factories import MONDAY_10AM, TAHRIR, ZAMALEK, make_candidate


@pytest.fixture
def trip() -> TripRequest:
    return build_trip_request(
        TAHRIR,
        ZAMALEK,
        requested_at=MONDAY_10AM,
        origin_address="Tahrir Square",
        destination_address="26th of July St, Zamalek",
    )


@pytest.fixture
def candidate() -> DriverCandidate:
    return make_candidate()


@pytest.fixture(autouse=True)
def _fresh_rate_limiter():
    """Rate limit counters live on a module-level Limiter; reset them per test."""
    limiter.reset()
    yield
    limiter.reset()
