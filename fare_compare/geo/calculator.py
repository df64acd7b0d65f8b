from datetime import UTC, datetime

from fare_compare.geo.distance import haversine_distance_km
from fare_compare.geo.traffic import TrafficModel
from fare_compare.models import Location, TripMetrics

ROAD_DISTANCE_FACTOR = 1.20


class GeoDistanceCalculator:
    """Turns two coordinates and a trip time into distance and duration.

    Straight-line distance is scaled by a fixed road factor to approximate
    the driving distance; duration divides that by a time-of-day speed.
    """

    def __init__(
        self,
        road_factor: float = ROAD_DISTANCE_FACTOR,
        traffic_model: TrafficModel | None = None,
    ) -> None:
        if road_factor < 1.0:
            raise ValueError("Road distance factor must be >= 1.0")
        self.road_factor = road_factor
        self.traffic_model = traffic_model or TrafficModel()

    def road_distance_km(self, origin: Location, destination: Location) -> float:
        straight = haversine_distance_km(
            origin.latitude, origin.longitude, destination.latitude, destination.longitude
        )
        return straight * self.road_factor

    def calculate(
        self,
        origin: Location,
        destination: Location,
        trip_time: datetime | None = None,
    ) -> TripMetrics:
        trip_time = trip_time or datetime.now(UTC)
        distance_km = self.road_distance_km(origin, destination)
        minutes = self.traffic_model.travel_minutes(distance_km, trip_time.hour)
        return TripMetrics(distance_km=distance_km, eta_minutes=int(minutes + 0.5))

    def pickup_eta_minutes(self, distance_km: float, trip_time: datetime) -> int:
        """Minutes for a driver distance_km away to reach the rider, at least 1."""
        minutes = self.traffic_model.travel_minutes(distance_km, trip_time.hour)
        return max(1, int(minutes + 0.5))
