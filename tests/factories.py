"""Shared test data builders."""

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from fare_compare.models import DriverCandidate, FareQuote, Location, ProviderId

CAIRO = ZoneInfo("Africa/Cairo")

# 2024-06-03 is a Monday
MONDAY_10AM = datetime(2024, 6, 3, 10, 0, tzinfo=CAIRO)
MONDAY_5PM = datetime(2024, 6, 3, 17, 0, tzinfo=CAIRO)
THURSDAY_7PM = datetime(2024, 6, 6, 19, 0, tzinfo=CAIRO)
FRIDAY_1PM = datetime(2024, 6, 7, 13, 0, tzinfo=CAIRO)

TAHRIR = Location(latitude=30.0444, longitude=31.2357)
ZAMALEK = Location(latitude=30.0626, longitude=31.2197)


def make_quote(provider_id: ProviderId = ProviderId.UBER, **overrides: Any) -> FareQuote:
    fields: dict[str, Any] = {
        "provider_id": provider_id,
        "display_name": provider_id.display_name,
        "price": 50.0,
        "eta_minutes": 5,
        "duration_minutes": 15,
        "distance_km": 5.0,
    }
    fields.update(overrides)
    return FareQuote(**fields)


def make_candidate(**overrides: Any) -> DriverCandidate:
    fields: dict[str, Any] = {
        "id": "drv-1",
        "name": "Karim Hassan",
        "phone": "+201001234567",
        "rating": 4.7,
        "total_rides": 310,
        "distance_km": 1.0,
        "vehicle_make": "Kia",
        "vehicle_model": "Cerato",
        "vehicle_color": "black",
    }
    fields.update(overrides)
    return DriverCandidate(**fields)
