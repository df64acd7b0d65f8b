from .capture import (
    HttpPriceCapture,
    PriceCapture,
    StaticPriceCapture,
    parse_observed_prices,
    select_observed_price,
)
from .drivers import (
    PLACEHOLDER_DRIVERS,
    DriverLookupResult,
    HttpNearbyDriverLookup,
    NearbyDriverLookup,
    StaticDriverLookup,
    row_to_candidate,
)

__all__ = [
    "PLACEHOLDER_DRIVERS",
    "DriverLookupResult",
    "HttpNearbyDriverLookup",
    "HttpPriceCapture",
    "NearbyDriverLookup",
    "PriceCapture",
    "StaticDriverLookup",
    "StaticPriceCapture",
    "parse_observed_prices",
    "row_to_candidate",
    "select_observed_price",
]
