"""Comparison orchestration: one TripRequest in, one RankedOfferSet out."""

import asyncio
import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, tzinfo
from zoneinfo import ZoneInfo

from fare_compare.collaborators.capture import HttpPriceCapture, PriceCapture
from fare_compare.collaborators.drivers import (
    DriverLookupResult,
    HttpNearbyDriverLookup,
    NearbyDriverLookup,
    StaticDriverLookup,
)
from fare_compare.compare_logging import log_comparison_context
from fare_compare.core.exceptions import FareCompareError
from fare_compare.core.retry import RetryConfig
from fare_compare.deeplinks import DeepLinkResolver
from fare_compare.geo.calculator import GeoDistanceCalculator
from fare_compare.merger import PriceSourceMerger
from fare_compare.models import (
    DispatchAction,
    FareQuote,
    Location,
    ObservedPrice,
    ProviderId,
    RankedOfferSet,
    SortPolicy,
    TripRequest,
)
from fare_compare.pricing.config_source import PricingConfigSource
from fare_compare.pricing.fare import FareEstimator
from fare_compare.pricing.providers import ProviderPricing
from fare_compare.ranking import Ranker
from fare_compare.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "Africa/Cairo"


class FareComparisonEngine:
    """Runs the comparison pipeline for each trip request.

    Holds only immutable configuration and stateless components, so one
    instance serves any number of concurrent comparisons.
    """

    def __init__(
        self,
        estimator: FareEstimator | None = None,
        geo_calculator: GeoDistanceCalculator | None = None,
        capture: PriceCapture | None = None,
        driver_lookup: NearbyDriverLookup | None = None,
        merger: PriceSourceMerger | None = None,
        ranker: Ranker | None = None,
        deep_links: DeepLinkResolver | None = None,
        search_radius_km: float = 5.0,
        capture_timeout: float = 2.0,
        driver_lookup_timeout: float = 3.0,
        default_policy: SortPolicy = SortPolicy.LOWEST_PRICE,
        timezone: tzinfo | None = None,
    ) -> None:
        self.estimator = estimator or FareEstimator()
        self.geo_calculator = geo_calculator or GeoDistanceCalculator()
        self.capture = capture
        self.driver_lookup = driver_lookup or StaticDriverLookup()
        self.merger = merger or PriceSourceMerger(
            pricing=self.estimator.pricing, geo_calculator=self.geo_calculator
        )
        self.ranker = ranker or Ranker()
        self.deep_links = deep_links or DeepLinkResolver()
        self.search_radius_km = search_radius_km
        self.capture_timeout = capture_timeout
        self.driver_lookup_timeout = driver_lookup_timeout
        self.default_policy = default_policy
        self.timezone = timezone or ZoneInfo(DEFAULT_TIMEZONE)

    async def compare(
        self,
        trip: TripRequest,
        policy: SortPolicy | str | None = None,
        capture: PriceCapture | None = None,
    ) -> RankedOfferSet:
        """Compare every provider's fare for one trip.

        Args:
            trip: Validated trip request (see build_trip_request)
            policy: Sort policy; unknown values fall back to lowest price
            capture: Overrides the configured capture source for this call

        Returns:
            Offers in rank order with the best one marked. Collaborator
            failures degrade the result instead of raising.
        """
        sort_policy = SortPolicy.parse(policy) if policy is not None else self.default_policy
        comparison_id = uuid.uuid4().hex[:12]

        with log_comparison_context(comparison_id):
            local_time = self.local_time(trip.requested_at)
            metrics = self.geo_calculator.calculate(trip.origin, trip.destination, local_time)
            estimates = self.estimator.estimate_all(
                metrics.distance_km, metrics.eta_minutes, local_time
            )

            observed, lookup = await asyncio.gather(
                self._fetch_observed(capture or self.capture),
                self._find_drivers(trip.origin),
            )

            merged = self.merger.merge(
                estimates, observed, lookup, metrics, local_time
            )
            offer_set = self.ranker.rank(
                merged.quotes,
                sort_policy,
                data_quality=merged.data_quality,
                distance_km=metrics.distance_km,
                duration_minutes=metrics.eta_minutes,
                requested_at=trip.requested_at,
            )

            best = offer_set.best
            logger.info(
                "Compared %d offers over %.1f km (policy=%s, best=%s)",
                len(offer_set.offers),
                metrics.distance_km,
                sort_policy.value,
                best.provider_id.value if best else None,
            )
            return offer_set

    def local_time(self, moment: datetime) -> datetime:
        """Wall-clock time in the service zone; naive values are taken as already local."""
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self.timezone)
        return moment.astimezone(self.timezone)

    def rerank(self, offer_set: RankedOfferSet, policy: SortPolicy | str) -> RankedOfferSet:
        return self.ranker.rerank(offer_set, SortPolicy.parse(policy))

    def resolve_action(self, quote: FareQuote, trip: TripRequest) -> DispatchAction:
        return self.deep_links.resolve(quote, trip)

    async def clear_observed_prices(self) -> None:
        """Ask the capture source to forget what it has seen.

        Raises:
            CaptureUnavailableError: the capture source could not be reached.
        """
        if self.capture is None:
            return
        await self.capture.clear_observed_prices()

    async def _fetch_observed(self, capture: PriceCapture | None) -> list[ObservedPrice] | None:
        """Observed prices, [] without a capture source, None when it failed."""
        if capture is None:
            return []
        try:
            return await asyncio.wait_for(
                capture.get_latest_observed_prices(), timeout=self.capture_timeout
            )
        except TimeoutError:
            logger.warning("Price capture timed out after %.1fs", self.capture_timeout)
        except FareCompareError as e:
            logger.warning("Price capture unavailable: %s", e.message)
        except Exception:
            logger.exception("Price capture failed")
        return None

    async def _find_drivers(self, origin: Location) -> DriverLookupResult:
        try:
            candidates = await asyncio.wait_for(
                self.driver_lookup.find_nearby_drivers(origin, self.search_radius_km),
                timeout=self.driver_lookup_timeout,
            )
        except TimeoutError:
            return DriverLookupResult.failure(
                f"timed out after {self.driver_lookup_timeout}s"
            )
        except FareCompareError as e:
            return DriverLookupResult.failure(e.message)
        except Exception as e:
            logger.exception("Driver lookup failed")
            return DriverLookupResult.failure(f"{type(e).__name__}: {e}")
        return DriverLookupResult.ok(candidates)


async def create_engine(
    settings: Settings,
    pricing: Mapping[ProviderId, ProviderPricing] | None = None,
) -> FareComparisonEngine:
    """Build an engine from settings, loading the pricing table first."""
    engine_settings = settings.engine

    if pricing is None:
        source = PricingConfigSource(
            url=settings.pricing.config_url, timeout=settings.pricing.timeout_seconds
        )
        pricing = await source.load()

    capture: PriceCapture | None = None
    if settings.capture.bridge_url:
        capture = HttpPriceCapture(
            settings.capture.bridge_url,
            timeout=settings.capture.timeout_seconds,
            max_age_seconds=engine_settings.observed_price_max_age_seconds,
        )

    driver_lookup: NearbyDriverLookup | None = None
    if settings.drivers.base_url:
        driver_lookup = HttpNearbyDriverLookup(
            settings.drivers.base_url,
            settings.drivers.api_key,
            timeout=settings.drivers.timeout_seconds,
            retry_config=RetryConfig(max_attempts=settings.drivers.max_retries),
        )
    else:
        logger.info("No driver lookup configured, independent offers disabled")

    geo_calculator = GeoDistanceCalculator(road_factor=engine_settings.road_distance_factor)
    estimator = FareEstimator(pricing=pricing, rounding_unit=engine_settings.rounding_unit)

    return FareComparisonEngine(
        estimator=estimator,
        geo_calculator=geo_calculator,
        capture=capture,
        driver_lookup=driver_lookup,
        merger=PriceSourceMerger(
            currency=engine_settings.currency,
            pricing=pricing,
            geo_calculator=geo_calculator,
        ),
        search_radius_km=engine_settings.search_radius_km,
        capture_timeout=engine_settings.capture_timeout_seconds,
        driver_lookup_timeout=engine_settings.driver_lookup_timeout_seconds,
        default_policy=SortPolicy.parse(engine_settings.default_sort_policy),
        timezone=ZoneInfo(engine_settings.timezone),
    )
