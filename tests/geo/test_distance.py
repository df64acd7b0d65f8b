import pytest

from fare_compare.geo import haversine_distance_km


@pytest.mark.unit
class TestHaversine:
    def test_one_degree_of_longitude_at_equator(self):
        assert haversine_distance_km(0.0, 0.0, 0.0, 1.0) == pytest.approx(111.195, abs=0.01)

    def test_same_point_is_zero(self):
        assert haversine_distance_km(30.0444, 31.2357, 30.0444, 31.2357) == 0.0

    def test_symmetric(self):
        forward = haversine_distance_km(30.0444, 31.2357, 30.0626, 31.2197)
        backward = haversine_distance_km(30.0626, 31.2197, 30.0444, 31.2357)
        assert forward == pytest.approx(backward)

