import math
from collections.abc import Mapping
from datetime import datetime

from pydantic import BaseModel, Field

from fare_compare.models import ProviderId
from fare_compare.pricing.providers import DEFAULT_PRICING, ProviderPricing
from fare_compare.pricing.surge import SurgeSchedule


class FareBreakdown(BaseModel):
    """Detailed breakdown of fare components."""

    provider_id: ProviderId
    base_fare: float = Field(ge=0)
    distance_charge: float = Field(ge=0)
    time_charge: float = Field(ge=0)
    booking_fee: float = Field(ge=0)
    subtotal: float = Field(ge=0)
    surge_multiplier: float = Field(ge=1.0)
    total_fare: float = Field(ge=0)
    minimum_applied: bool = False


def round_to_unit(amount: float, unit: float) -> float:
    """Round half-up to the nearest multiple of unit (amount >= 0)."""
    return math.floor(amount / unit + 0.5) * unit


class FareEstimator:
    """Computes formula-based fares with time-dependent surge.

    One formula serves every provider; only the ProviderPricing record
    differs. Pure given its inputs, so results are reproducible.
    """

    def __init__(
        self,
        pricing: Mapping[ProviderId, ProviderPricing] | None = None,
        rounding_unit: float = 5.0,
        surge_schedule: SurgeSchedule | None = None,
    ) -> None:
        if rounding_unit <= 0:
            raise ValueError("Rounding unit must be positive")
        self.pricing = dict(pricing or DEFAULT_PRICING)
        self.rounding_unit = rounding_unit
        self.surge_schedule = surge_schedule or SurgeSchedule()

    def pricing_for(self, provider_id: ProviderId) -> ProviderPricing:
        return self.pricing.get(provider_id) or DEFAULT_PRICING[provider_id]

    def surge_for(self, provider_id: ProviderId, trip_time: datetime) -> float:
        return self.surge_schedule.provider_surge(
            trip_time, self.pricing_for(provider_id).surge_damping
        )

    def estimate(
        self,
        provider_id: ProviderId,
        distance_km: float,
        duration_minutes: float,
        trip_time: datetime,
    ) -> FareBreakdown:
        """
        Estimate the fare for one provider.

        price = (base + km * per_km + min * per_min + booking_fee) * surge,
        rounded to the rounding unit and floored at the provider minimum.
        """
        if distance_km < 0:
            raise ValueError("Distance must be non-negative")
        if duration_minutes < 0:
            raise ValueError("Duration must be non-negative")

        pricing = self.pricing_for(provider_id)
        distance_charge = distance_km * pricing.per_km_rate
        time_charge = duration_minutes * pricing.per_minute_rate
        subtotal = pricing.base_fare + distance_charge + time_charge + pricing.booking_fee

        surge = self.surge_for(provider_id, trip_time)
        rounded = round_to_unit(subtotal * surge, self.rounding_unit)
        total_fare = max(rounded, pricing.minimum_fare)

        return FareBreakdown(
            provider_id=provider_id,
            base_fare=pricing.base_fare,
            distance_charge=distance_charge,
            time_charge=time_charge,
            booking_fee=pricing.booking_fee,
            subtotal=subtotal,
            surge_multiplier=surge,
            total_fare=total_fare,
            minimum_applied=rounded < pricing.minimum_fare,
        )

    def estimate_all(
        self,
        distance_km: float,
        duration_minutes: float,
        trip_time: datetime,
    ) -> dict[ProviderId, FareBreakdown]:
        return {
            provider_id: self.estimate(provider_id, distance_km, duration_minutes, trip_time)
            for provider_id in ProviderId
        }
