"""Overlay live-observed fares onto formula estimates."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from fare_compare.collaborators.drivers import PLACEHOLDER_DRIVERS, DriverLookupResult
from fare_compare.geo.calculator import GeoDistanceCalculator
from fare_compare.models import (
    DataQuality,
    DriverCandidate,
    FareQuote,
    ObservedPrice,
    ProviderId,
    TripMetrics,
)
from fare_compare.pricing.fare import FareBreakdown
from fare_compare.pricing.providers import DEFAULT_PRICING, ProviderPricing

logger = logging.getLogger(__name__)

# Capture ETAs outside this window are misreads (prices, distances).
OBSERVED_ETA_RANGE = (1, 60)


@dataclass(frozen=True)
class MergeResult:
    quotes: tuple[FareQuote, ...]
    data_quality: DataQuality


def latest_valid_observations(
    observed: Sequence[ObservedPrice],
) -> dict[ProviderId, ObservedPrice]:
    """Keep the most recent positive observation per provider."""
    latest: dict[ProviderId, ObservedPrice] = {}
    for observation in observed:
        if not observation.price > 0:
            continue
        current = latest.get(observation.provider_id)
        if current is None or observation.observed_at > current.observed_at:
            latest[observation.provider_id] = observation
    return latest


def nearest_candidate(candidates: Sequence[DriverCandidate]) -> DriverCandidate | None:
    if not candidates:
        return None
    # min() keeps the first of equally distant candidates
    return min(candidates, key=lambda c: c.distance_km)


class PriceSourceMerger:
    """Builds one FareQuote per provider, preferring observed fares.

    A valid observed fare is used verbatim and flagged ``is_observed``;
    otherwise the provider's estimate is used. The independent quote needs
    at least one nearby driver. When the driver lookup failed, fixed
    placeholder drivers stand in and ``data_quality.drivers`` says so.
    """

    def __init__(
        self,
        currency: str = "EGP",
        pricing: Mapping[ProviderId, ProviderPricing] | None = None,
        geo_calculator: GeoDistanceCalculator | None = None,
        placeholder_drivers: Sequence[DriverCandidate] = PLACEHOLDER_DRIVERS,
    ) -> None:
        self.currency = currency
        self.pricing = dict(pricing or DEFAULT_PRICING)
        self.geo_calculator = geo_calculator or GeoDistanceCalculator()
        self.placeholder_drivers = tuple(placeholder_drivers)

    def merge(
        self,
        estimates: Mapping[ProviderId, FareBreakdown],
        observed: Sequence[ObservedPrice] | None,
        driver_lookup: DriverLookupResult,
        metrics: TripMetrics,
        trip_time: datetime,
    ) -> MergeResult:
        """Merge estimates with observations.

        Args:
            estimates: FareEstimator output keyed by provider
            observed: Captured fares, or None when the capture service was
                unavailable
            driver_lookup: Result of the nearby driver lookup
            metrics: Trip distance and duration
            trip_time: When the trip starts, for pickup ETAs

        Returns:
            Quotes in provider order plus where their data came from
        """
        observations = latest_valid_observations(observed or ())
        candidates, driver_source = self._resolve_candidates(driver_lookup)

        quotes: list[FareQuote] = []
        for provider_id in ProviderId:
            estimate = estimates.get(provider_id)
            if estimate is None:
                continue

            if provider_id is ProviderId.INDEPENDENT:
                driver = nearest_candidate(candidates)
                if driver is None:
                    logger.debug("No nearby drivers, skipping independent quote")
                    continue
                quote = self._independent_quote(
                    estimate, observations.get(provider_id), driver, metrics, trip_time
                )
            else:
                quote = self._provider_quote(
                    provider_id, estimate, observations.get(provider_id), metrics
                )
            quotes.append(quote)

        data_quality = DataQuality(
            drivers=driver_source,
            observed_prices="unavailable" if observed is None else "live",
        )
        if data_quality.is_degraded:
            logger.warning(
                "Comparison degraded: drivers=%s observed_prices=%s",
                data_quality.drivers,
                data_quality.observed_prices,
            )
        return MergeResult(quotes=tuple(quotes), data_quality=data_quality)

    def _resolve_candidates(
        self, driver_lookup: DriverLookupResult
    ) -> tuple[tuple[DriverCandidate, ...], str]:
        if driver_lookup.failed:
            logger.warning(
                "Driver lookup failed (%s), substituting %d placeholder drivers",
                driver_lookup.error,
                len(self.placeholder_drivers),
            )
            return self.placeholder_drivers, "placeholder"
        if not driver_lookup.candidates:
            return (), "none"
        return driver_lookup.candidates, "live"

    def _price_and_flag(
        self, estimate: FareBreakdown, observation: ObservedPrice | None
    ) -> tuple[float, bool]:
        if observation is not None:
            return observation.price, True
        return estimate.total_fare, False

    def _provider_quote(
        self,
        provider_id: ProviderId,
        estimate: FareBreakdown,
        observation: ObservedPrice | None,
        metrics: TripMetrics,
    ) -> FareQuote:
        price, is_observed = self._price_and_flag(estimate, observation)
        eta = self.pricing.get(provider_id, DEFAULT_PRICING[provider_id]).pickup_eta_minutes
        if observation is not None:
            low, high = OBSERVED_ETA_RANGE
            if low <= observation.eta_minutes <= high:
                eta = observation.eta_minutes

        return FareQuote(
            provider_id=provider_id,
            display_name=provider_id.display_name,
            price=price,
            currency=self.currency,
            eta_minutes=eta,
            duration_minutes=metrics.eta_minutes,
            distance_km=metrics.distance_km,
            surge_multiplier=estimate.surge_multiplier,
            is_observed=is_observed,
        )

    def _independent_quote(
        self,
        estimate: FareBreakdown,
        observation: ObservedPrice | None,
        driver: DriverCandidate,
        metrics: TripMetrics,
        trip_time: datetime,
    ) -> FareQuote:
        price, is_observed = self._price_and_flag(estimate, observation)

        return FareQuote(
            provider_id=ProviderId.INDEPENDENT,
            display_name=ProviderId.INDEPENDENT.display_name,
            price=price,
            currency=self.currency,
            eta_minutes=self.geo_calculator.pickup_eta_minutes(driver.distance_km, trip_time),
            duration_minutes=metrics.eta_minutes,
            distance_km=metrics.distance_km,
            surge_multiplier=estimate.surge_multiplier,
            is_observed=is_observed,
            rating=driver.rating,
            total_rides=driver.total_rides,
            driver_id=driver.id,
            driver_name=driver.name,
            driver_phone=driver.phone or None,
            vehicle_info=driver.vehicle_info,
            vehicle_color=driver.vehicle_color,
        )
