"""Pricing configuration collaborator.

Fetches per-provider fare records from a JSON endpoint and falls back to
the built-in table whenever the source is missing or unusable. Expected
payload (every field optional, merged onto the defaults)::

    {"uber": {"base_fare": 12.0, "per_km_rate": 4.5, ...}, "careem": {...}}
"""

import logging

import httpx
import pydantic

from fare_compare.core.exceptions import NetworkError, ServiceUnavailableError
from fare_compare.core.retry import RetryConfig, with_retry
from fare_compare.pricing.providers import PricingTable, apply_overrides, default_pricing_table

logger = logging.getLogger(__name__)


class PricingSourceError(ServiceUnavailableError):
    """Pricing config endpoint returned an error (retryable)."""

    pass


class PricingSourceTimeoutError(NetworkError):
    """Pricing config request timed out (retryable)."""

    pass


class PricingConfigSource:
    def __init__(
        self,
        url: str = "",
        timeout: float = 2.0,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig(max_attempts=2)

    async def load(self) -> PricingTable:
        """Return the configured pricing table, or the defaults on any failure."""
        if not self.url:
            logger.info("No pricing config URL set, using built-in pricing table")
            return default_pricing_table()

        try:
            payload = await with_retry(
                self._fetch, self.retry_config, operation_name="pricing config fetch"
            )
        except (PricingSourceError, PricingSourceTimeoutError) as e:
            logger.warning("Pricing config unavailable, using defaults: %s", e)
            return default_pricing_table()

        if not isinstance(payload, dict):
            logger.warning("Pricing config payload is not an object, using defaults")
            return default_pricing_table()

        try:
            table, skipped = apply_overrides(payload)
        except (pydantic.ValidationError, TypeError, ValueError) as e:
            logger.warning("Pricing config payload invalid, using defaults: %s", e)
            return default_pricing_table()

        if skipped:
            logger.warning("Ignoring pricing records for unknown providers: %s", skipped)
        logger.info("Loaded pricing config for %d providers", len(payload) - len(skipped))
        return table

    async def _fetch(self) -> object:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.url)

                if response.status_code >= 400:
                    raise PricingSourceError(
                        f"Pricing config server error: {response.status_code}"
                    )

                return response.json()

        except httpx.TimeoutException as e:
            raise PricingSourceTimeoutError(f"Request timed out after {self.timeout}s") from e
        except httpx.TransportError as e:
            raise PricingSourceError(f"Network error: {e}") from e
        except ValueError as e:
            raise PricingSourceError(f"Malformed JSON from pricing config: {e}") from e
