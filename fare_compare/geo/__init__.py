from .calculator import ROAD_DISTANCE_FACTOR, GeoDistanceCalculator
from .distance import EARTH_RADIUS_KM, haversine_distance_km
from .traffic import TrafficModel

__all__ = [
    "EARTH_RADIUS_KM",
    "ROAD_DISTANCE_FACTOR",
    "GeoDistanceCalculator",
    "TrafficModel",
    "haversine_distance_km",
]
