"""Value types shared by every stage of a fare comparison."""

from collections.abc import Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

import pydantic
from pydantic import BaseModel, ConfigDict, Field, computed_field

from fare_compare.core.exceptions import IncompleteTripRequestError, InvalidLocationError


class ProviderId(str, Enum):
    """Closed set of fare sources compared by the engine."""

    UBER = "uber"
    CAREEM = "careem"
    BOLT = "bolt"
    DIDI = "didi"
    INDRIVER = "indriver"
    INDEPENDENT = "independent"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES: dict[ProviderId, str] = {
    ProviderId.UBER: "Uber",
    ProviderId.CAREEM: "Careem",
    ProviderId.BOLT: "Bolt",
    ProviderId.DIDI: "DiDi",
    ProviderId.INDRIVER: "InDriver",
    ProviderId.INDEPENDENT: "GO-ON",
}


# Android package of each competitor app; independent drivers have none.
ANDROID_PACKAGES: dict[ProviderId, str] = {
    ProviderId.UBER: "com.ubercab",
    ProviderId.CAREEM: "com.careem.acma",
    ProviderId.BOLT: "ee.mtakso.client",
    ProviderId.DIDI: "com.didiglobal.passenger",
    ProviderId.INDRIVER: "sinet.startup.inDriver",
}

PACKAGE_TO_PROVIDER: dict[str, ProviderId] = {
    package: provider_id for provider_id, package in ANDROID_PACKAGES.items()
}


class SortPolicy(str, Enum):
    """How the ranker picks the best offer."""

    LOWEST_PRICE = "lowest_price"
    BEST_SERVICE = "best_service"
    FASTEST_ARRIVAL = "fastest_arrival"

    @classmethod
    def parse(cls, value: "str | SortPolicy | None") -> "SortPolicy":
        """Resolve a stored preference, defaulting to lowest price."""
        if isinstance(value, SortPolicy):
            return value
        for policy in cls:
            if policy.value == value:
                return policy
        return cls.LOWEST_PRICE


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0, allow_inf_nan=False)
    longitude: float = Field(ge=-180.0, le=180.0, allow_inf_nan=False)

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)


class TripRequest(BaseModel):
    """One comparison request. Built per call and never persisted."""

    model_config = ConfigDict(frozen=True)

    origin: Location
    destination: Location
    requested_at: datetime
    origin_address: str = ""
    destination_address: str = ""


LocationInput = Location | tuple[float, float] | Mapping[str, Any]


def _coerce_location(value: LocationInput, role: str) -> Location:
    if isinstance(value, Location):
        return value
    try:
        if isinstance(value, tuple):
            lat, lon = value
            return Location(latitude=lat, longitude=lon)
        return Location.model_validate(dict(value))
    except (pydantic.ValidationError, TypeError, ValueError) as e:
        raise InvalidLocationError(
            f"Invalid {role} coordinates", details={"role": role, "value": repr(value)}
        ) from e


def build_trip_request(
    origin: LocationInput | None,
    destination: LocationInput | None,
    requested_at: datetime | None = None,
    origin_address: str = "",
    destination_address: str = "",
) -> TripRequest:
    """Validate caller input and build a TripRequest.

    Raises:
        IncompleteTripRequestError: origin or destination is missing.
        InvalidLocationError: coordinates are out of range or malformed.
    """
    missing = [
        role for role, value in (("origin", origin), ("destination", destination)) if value is None
    ]
    if missing:
        raise IncompleteTripRequestError(
            f"Trip request is missing: {', '.join(missing)}", details={"missing": missing}
        )

    return TripRequest(
        origin=_coerce_location(origin, "origin"),  # type: ignore[arg-type]
        destination=_coerce_location(destination, "destination"),  # type: ignore[arg-type]
        requested_at=requested_at or datetime.now(UTC),
        origin_address=origin_address,
        destination_address=destination_address,
    )


class TripMetrics(BaseModel):
    """Road-adjusted distance and traffic-aware duration of a trip."""

    model_config = ConfigDict(frozen=True)

    distance_km: float = Field(ge=0)
    eta_minutes: int = Field(ge=0)


class DriverCandidate(BaseModel):
    """An independent driver near the pickup point."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phone: str = ""
    rating: float = Field(default=5.0, ge=0.0, le=5.0)
    total_rides: int = Field(default=0, ge=0)
    distance_km: float = Field(default=0.0, ge=0.0)
    vehicle_type: str | None = None
    vehicle_make: str | None = None
    vehicle_model: str | None = None
    vehicle_color: str | None = None
    plate_number: str | None = None

    @property
    def vehicle_info(self) -> str:
        if self.vehicle_make and self.vehicle_model:
            return f"{self.vehicle_make} {self.vehicle_model}"
        return self.vehicle_type or "car"


class ObservedPrice(BaseModel):
    """A fare read from a competitor app's own screen."""

    model_config = ConfigDict(frozen=True)

    provider_id: ProviderId
    price: float
    observed_at: datetime
    eta_minutes: int = 0
    service_type: str = ""


class FareQuote(BaseModel):
    """A comparable offer from one provider."""

    model_config = ConfigDict(frozen=True)

    provider_id: ProviderId
    display_name: str
    price: float = Field(ge=0)
    currency: str = "EGP"
    eta_minutes: int = Field(default=0, ge=0)
    duration_minutes: int = Field(default=0, ge=0)
    distance_km: float = Field(default=0.0, ge=0)
    surge_multiplier: float = Field(default=1.0, ge=1.0)
    is_observed: bool = False
    is_best: bool = False
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    total_rides: int | None = Field(default=None, ge=0)
    driver_id: str | None = None
    driver_name: str | None = None
    driver_phone: str | None = None
    vehicle_info: str | None = None
    vehicle_color: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_surge(self) -> bool:
        return self.surge_multiplier > 1.05

    @computed_field  # type: ignore[prop-decorator]
    @property
    def surge_percent(self) -> int:
        return int((self.surge_multiplier - 1) * 100 + 0.5)


class DataQuality(BaseModel):
    """Where the non-formula data in a comparison came from."""

    model_config = ConfigDict(frozen=True)

    drivers: Literal["live", "placeholder", "none"] = "live"
    observed_prices: Literal["live", "unavailable"] = "live"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_degraded(self) -> bool:
        return self.drivers == "placeholder" or self.observed_prices == "unavailable"


class RankedOfferSet(BaseModel):
    """Offers in rank order, with an explicit pointer to the best one."""

    model_config = ConfigDict(frozen=True)

    offers: tuple[FareQuote, ...]
    policy: SortPolicy
    best_index: int | None = None
    data_quality: DataQuality = Field(default_factory=DataQuality)
    distance_km: float = Field(default=0.0, ge=0)
    duration_minutes: int = Field(default=0, ge=0)
    requested_at: datetime | None = None

    @property
    def best(self) -> FareQuote | None:
        if self.best_index is None:
            return None
        return self.offers[self.best_index]

    def provider_ids(self) -> list[ProviderId]:
        return [offer.provider_id for offer in self.offers]


class DispatchAction(BaseModel):
    """What the client should open when the rider picks an offer."""

    model_config = ConfigDict(frozen=True)

    provider_id: ProviderId
    kind: Literal["deep_link", "whatsapp", "app_launch"]
    uri: str | None = None
    package_name: str | None = None
    store_url: str | None = None

    @property
    def has_link(self) -> bool:
        return self.uri is not None
