from fastapi import APIRouter, Depends, HTTPException, Request, status

from fare_compare.api.auth import verify_api_key
from fare_compare.api.dependencies import EngineDep, SettingsDep
from fare_compare.api.models import (
    ComparisonRequest,
    ComparisonResponse,
    DispatchRequest,
    RerankRequest,
)
from fare_compare.api.rate_limit import limiter
from fare_compare.collaborators.capture import StaticPriceCapture, parse_observed_prices
from fare_compare.core.exceptions import CaptureUnavailableError
from fare_compare.models import DispatchAction, SortPolicy

router = APIRouter(dependencies=[Depends(verify_api_key)])


@router.post("/comparisons", response_model=ComparisonResponse)
@limiter.limit("60/minute")
async def compare_fares(
    request: Request, body: ComparisonRequest, engine: EngineDep, settings: SettingsDep
) -> ComparisonResponse:
    """Rank every provider's offer for one trip."""
    trip = body.to_trip_request(body.requested_at)

    capture = None
    if body.observed_prices is not None:
        policy = SortPolicy.parse(body.sort_policy or settings.engine.default_sort_policy)
        capture = StaticPriceCapture(
            parse_observed_prices(
                body.observed_prices,
                max_age_seconds=settings.engine.observed_price_max_age_seconds,
                policy=policy,
            )
        )

    offer_set = await engine.compare(trip, body.sort_policy, capture=capture)
    surge_label = engine.estimator.surge_schedule.describe(engine.local_time(trip.requested_at))
    return ComparisonResponse.from_offer_set(offer_set, surge_label=surge_label)


@router.post("/comparisons/rerank", response_model=ComparisonResponse)
@limiter.limit("60/minute")
async def rerank_offers(
    request: Request, body: RerankRequest, engine: EngineDep
) -> ComparisonResponse:
    """Re-sort a previous result after the rider switched sort policy."""
    return ComparisonResponse.from_offer_set(engine.rerank(body.offer_set, body.sort_policy))


@router.post("/comparisons/dispatch", response_model=DispatchAction)
@limiter.limit("60/minute")
async def dispatch_offer(request: Request, body: DispatchRequest, engine: EngineDep) -> DispatchAction:
    """Resolve how to open the provider app for the chosen offer."""
    trip = body.to_trip_request()
    return engine.resolve_action(body.quote, trip)


@router.delete("/observed-prices", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("10/minute")
async def clear_observed_prices(request: Request, engine: EngineDep) -> None:
    """Drop every price the capture bridge has recorded."""
    try:
        await engine.clear_observed_prices()
    except CaptureUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message) from e
