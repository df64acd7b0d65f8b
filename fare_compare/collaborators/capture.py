"""Boundary to the on-device price capture service.

The capture service reads fares off competitor apps' screens and exposes
them as JSON records::

    {"appName": "Uber", "packageName": "com.ubercab", "price": 85.0,
     "serviceType": "UberX", "eta": 4, "timestamp": 1718000000000}

``timestamp`` is epoch milliseconds. A record may carry ``providerId``
instead of ``packageName``, ``observedAt`` (ISO 8601) instead of
``timestamp``, and ``prices`` (every fare seen on one screen) instead of
``price``.
"""

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

import httpx
import pydantic

from fare_compare.core.exceptions import CaptureUnavailableError
from fare_compare.models import PACKAGE_TO_PROVIDER, ObservedPrice, ProviderId, SortPolicy

logger = logging.getLogger(__name__)

# Fares outside this band on a capture screen are promo banners, wallet
# balances and the like rather than ride prices.
REASONABLE_PRICE_RANGE = (15.0, 1000.0)


class PriceCapture(Protocol):
    async def get_latest_observed_prices(self) -> list[ObservedPrice]: ...

    async def clear_observed_prices(self) -> None: ...


def select_observed_price(
    prices: Sequence[float], policy: SortPolicy = SortPolicy.LOWEST_PRICE
) -> float | None:
    """Pick one fare from every fare shown on a single provider screen.

    Best service takes the most expensive tier, everything else the
    cheapest. Returns None when no positive price was seen.
    """
    positive = [p for p in prices if math.isfinite(p) and p > 0]
    if not positive:
        return None
    low, high = REASONABLE_PRICE_RANGE
    reasonable = [p for p in positive if low <= p <= high]
    if not reasonable:
        return min(positive)
    if policy is SortPolicy.BEST_SERVICE:
        return max(reasonable)
    return min(reasonable)


def _resolve_provider(record: Mapping[str, Any]) -> ProviderId | None:
    provider = record.get("providerId") or record.get("provider_id")
    if provider:
        try:
            return ProviderId(str(provider).lower())
        except ValueError:
            return None
    return PACKAGE_TO_PROVIDER.get(str(record.get("packageName", "")))


def _resolve_observed_at(record: Mapping[str, Any]) -> datetime | None:
    if "observedAt" in record:
        observed_at = datetime.fromisoformat(str(record["observedAt"]))
        return observed_at if observed_at.tzinfo else observed_at.replace(tzinfo=UTC)
    timestamp = record.get("timestamp")
    if timestamp is None:
        return None
    return datetime.fromtimestamp(float(timestamp) / 1000.0, tz=UTC)


def parse_observed_prices(
    payload: Iterable[Mapping[str, Any]],
    now: datetime | None = None,
    max_age_seconds: float = 300,
    policy: SortPolicy = SortPolicy.LOWEST_PRICE,
) -> list[ObservedPrice]:
    """Turn capture records into ObservedPrice values.

    Records for unknown apps, without a positive price, without a timestamp
    or older than max_age_seconds are dropped; malformed records are logged
    and skipped.
    """
    now = now or datetime.now(UTC)
    max_age = timedelta(seconds=max_age_seconds)
    observed: list[ObservedPrice] = []

    for record in payload:
        provider_id = _resolve_provider(record)
        if provider_id is None:
            logger.debug("Skipping capture record for unknown app: %s", record.get("packageName"))
            continue

        try:
            if "prices" in record:
                price = select_observed_price([float(p) for p in record["prices"]], policy)
            else:
                price = float(record.get("price") or 0)
            observed_at = _resolve_observed_at(record)
            eta = int(record.get("eta") or 0)
        except (TypeError, ValueError, OverflowError, OSError) as e:
            logger.warning("Malformed capture record for %s: %s", provider_id.value, e)
            continue

        if price is None or not math.isfinite(price) or price <= 0:
            continue
        if observed_at is None or now - observed_at > max_age:
            logger.debug("Dropping stale capture for %s", provider_id.value)
            continue

        try:
            observed.append(
                ObservedPrice(
                    provider_id=provider_id,
                    price=price,
                    observed_at=observed_at,
                    eta_minutes=max(eta, 0),
                    service_type=str(record.get("serviceType") or ""),
                )
            )
        except pydantic.ValidationError as e:
            logger.warning("Invalid capture record for %s: %s", provider_id.value, e)

    return observed


class StaticPriceCapture:
    """Serves a fixed list of observations, e.g. ones posted with a request."""

    def __init__(self, prices: Iterable[ObservedPrice] = ()) -> None:
        self._prices = list(prices)

    async def get_latest_observed_prices(self) -> list[ObservedPrice]:
        return list(self._prices)

    async def clear_observed_prices(self) -> None:
        self._prices.clear()


class HttpPriceCapture:
    """Talks to the device bridge that exposes the capture service over HTTP."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 1.5,
        max_age_seconds: float = 300,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_age_seconds = max_age_seconds

    async def get_latest_observed_prices(self) -> list[ObservedPrice]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.base_url}/prices")
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            raise CaptureUnavailableError(f"Capture bridge unavailable: {e}") from e
        except ValueError as e:
            raise CaptureUnavailableError(f"Malformed capture payload: {e}") from e

        if not isinstance(payload, list):
            raise CaptureUnavailableError("Capture payload is not a list")
        return parse_observed_prices(
            (r for r in payload if isinstance(r, dict)), max_age_seconds=self.max_age_seconds
        )

    async def clear_observed_prices(self) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.delete(f"{self.base_url}/prices")
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise CaptureUnavailableError(f"Capture bridge unavailable: {e}") from e
