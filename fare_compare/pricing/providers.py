"""Per-provider fare records and the built-in default table."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fare_compare.models import ProviderId


class ProviderPricing(BaseModel):
    """Fare model constants for one provider, in the configured currency."""

    model_config = ConfigDict(frozen=True)

    base_fare: float = Field(ge=0)
    per_km_rate: float = Field(ge=0)
    per_minute_rate: float = Field(ge=0)
    booking_fee: float = Field(default=0.0, ge=0)
    minimum_fare: float = Field(ge=0)
    surge_damping: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Share of the market surge this provider passes on (1.0 = all of it)",
    )
    pickup_eta_minutes: int = Field(default=5, ge=0, le=60)


PricingTable = dict[ProviderId, ProviderPricing]

# Egypt, 2024 fare sheets. Negotiated providers (InDriver, independent
# drivers) charge no booking fee.
DEFAULT_PRICING: Mapping[ProviderId, ProviderPricing] = {
    ProviderId.UBER: ProviderPricing(
        base_fare=12.0,
        per_km_rate=4.50,
        per_minute_rate=0.90,
        booking_fee=6.0,
        minimum_fare=25.0,
        surge_damping=1.0,
        pickup_eta_minutes=3,
    ),
    ProviderId.CAREEM: ProviderPricing(
        base_fare=10.0,
        per_km_rate=4.20,
        per_minute_rate=0.85,
        booking_fee=5.0,
        minimum_fare=22.0,
        surge_damping=0.9,
        pickup_eta_minutes=4,
    ),
    ProviderId.BOLT: ProviderPricing(
        base_fare=8.0,
        per_km_rate=3.80,
        per_minute_rate=0.75,
        booking_fee=4.0,
        minimum_fare=20.0,
        surge_damping=0.85,
        pickup_eta_minutes=4,
    ),
    ProviderId.DIDI: ProviderPricing(
        base_fare=7.0,
        per_km_rate=3.50,
        per_minute_rate=0.70,
        booking_fee=3.0,
        minimum_fare=18.0,
        surge_damping=0.7,
        pickup_eta_minutes=5,
    ),
    ProviderId.INDRIVER: ProviderPricing(
        base_fare=8.0,
        per_km_rate=3.60,
        per_minute_rate=0.65,
        minimum_fare=18.0,
        surge_damping=0.5,
        pickup_eta_minutes=4,
    ),
    ProviderId.INDEPENDENT: ProviderPricing(
        base_fare=10.0,
        per_km_rate=3.20,
        per_minute_rate=0.50,
        minimum_fare=15.0,
        surge_damping=0.3,
        pickup_eta_minutes=5,
    ),
}


def default_pricing_table() -> PricingTable:
    """Fresh copy of the built-in table (records are frozen, the dict is not)."""
    return dict(DEFAULT_PRICING)


def apply_overrides(
    overrides: Mapping[str, Mapping[str, Any]],
    base: Mapping[ProviderId, ProviderPricing] | None = None,
) -> tuple[PricingTable, list[str]]:
    """Merge partial per-provider records onto a pricing table.

    Unknown provider keys are skipped and returned so the caller can log
    them. Invalid values raise pydantic.ValidationError.
    """
    table: PricingTable = dict(base or DEFAULT_PRICING)
    skipped: list[str] = []
    for key, fields in overrides.items():
        try:
            provider_id = ProviderId(key)
        except ValueError:
            skipped.append(key)
            continue
        merged = {**table[provider_id].model_dump(), **dict(fields)}
        table[provider_id] = ProviderPricing.model_validate(merged)
    return table, skipped
