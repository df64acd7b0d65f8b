from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from fare_compare.models import (
    DataQuality,
    FareQuote,
    RankedOfferSet,
    SortPolicy,
    TripRequest,
    build_trip_request,
)


class Coordinates(BaseModel):
    # Range checks happen in build_trip_request so they surface as
    # InvalidLocationError like any other caller.
    latitude: float
    longitude: float


class TripFields(BaseModel):
    origin: Coordinates | None = None
    destination: Coordinates | None = None
    origin_address: str = Field(default="", max_length=300)
    destination_address: str = Field(default="", max_length=300)

    def to_trip_request(self, requested_at: datetime | None = None) -> TripRequest:
        return build_trip_request(
            self.origin.model_dump() if self.origin else None,
            self.destination.model_dump() if self.destination else None,
            requested_at=requested_at,
            origin_address=self.origin_address,
            destination_address=self.destination_address,
        )


class ComparisonRequest(TripFields):
    requested_at: datetime | None = None
    sort_policy: str | None = None
    # Raw capture records, same shape the device bridge serves
    observed_prices: list[dict[str, Any]] | None = Field(default=None, max_length=100)


class RerankRequest(BaseModel):
    offer_set: RankedOfferSet
    sort_policy: str


class DispatchRequest(TripFields):
    quote: FareQuote


class ComparisonResponse(BaseModel):
    offers: list[FareQuote]
    policy: SortPolicy
    best_index: int | None
    data_quality: DataQuality
    distance_km: float
    duration_minutes: int
    requested_at: datetime | None
    surge_label: str | None = None

    @classmethod
    def from_offer_set(
        cls, offer_set: RankedOfferSet, surge_label: str | None = None
    ) -> "ComparisonResponse":
        return cls(
            offers=list(offer_set.offers),
            policy=offer_set.policy,
            best_index=offer_set.best_index,
            data_quality=offer_set.data_quality,
            distance_km=round(offer_set.distance_km, 2),
            duration_minutes=offer_set.duration_minutes,
            requested_at=offer_set.requested_at,
            surge_label=surge_label,
        )
