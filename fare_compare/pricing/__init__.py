from .config_source import PricingConfigSource
from .fare import FareBreakdown, FareEstimator, round_to_unit
from .providers import (
    DEFAULT_PRICING,
    PricingTable,
    ProviderPricing,
    apply_overrides,
    default_pricing_table,
)
from .surge import SurgeSchedule

__all__ = [
    "DEFAULT_PRICING",
    "FareBreakdown",
    "FareEstimator",
    "PricingConfigSource",
    "PricingTable",
    "ProviderPricing",
    "SurgeSchedule",
    "apply_overrides",
    "default_pricing_table",
    "round_to_unit",
]
