from collections.abc import Callable, Sequence
from datetime import datetime

from fare_compare.models import DataQuality, FareQuote, RankedOfferSet, SortPolicy

SortKey = Callable[[FareQuote], tuple[float, ...]]


def _rating(quote: FareQuote) -> float:
    return quote.rating if quote.rating is not None else 0.0


def service_score(quote: FareQuote) -> float:
    """Composite score for best service: rating * 10 - price / 100."""
    return _rating(quote) * 10 - quote.price / 100


_SORT_KEYS: dict[SortPolicy, SortKey] = {
    SortPolicy.LOWEST_PRICE: lambda q: (q.price, q.eta_minutes, -_rating(q)),
    SortPolicy.FASTEST_ARRIVAL: lambda q: (q.eta_minutes, q.price),
    SortPolicy.BEST_SERVICE: lambda q: (-service_score(q), q.price),
}


class Ranker:
    """Orders quotes by a sort policy and marks the best one.

    Pure: input quotes are never mutated and the result holds fresh copies
    with ``is_best`` set. The sort is stable, so quotes equal on every key
    keep their input order and re-ranking a ranked set is a no-op.
    """

    def rank(
        self,
        quotes: Sequence[FareQuote],
        policy: SortPolicy = SortPolicy.LOWEST_PRICE,
        data_quality: DataQuality | None = None,
        distance_km: float = 0.0,
        duration_minutes: int = 0,
        requested_at: datetime | None = None,
    ) -> RankedOfferSet:
        ordered = sorted(quotes, key=_SORT_KEYS[policy])
        offers = tuple(
            quote.model_copy(update={"is_best": index == 0})
            for index, quote in enumerate(ordered)
        )
        return RankedOfferSet(
            offers=offers,
            policy=policy,
            best_index=0 if offers else None,
            data_quality=data_quality or DataQuality(),
            distance_km=distance_km,
            duration_minutes=duration_minutes,
            requested_at=requested_at,
        )

    def rerank(self, offer_set: RankedOfferSet, policy: SortPolicy) -> RankedOfferSet:
        """Rank an existing set again, e.g. after the rider switches policy."""
        return self.rank(
            offer_set.offers,
            policy,
            data_quality=offer_set.data_quality,
            distance_km=offer_set.distance_km,
            duration_minutes=offer_set.duration_minutes,
            requested_at=offer_set.requested_at,
        )
