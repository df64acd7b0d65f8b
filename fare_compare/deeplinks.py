"""Map a chosen offer to the action that opens the provider's app.

The query parameter names below are each app's own contract and must stay
exactly as written. Providers without a public URI scheme resolve to a
plain app launch.
"""

import logging
import re
from urllib.parse import quote

from fare_compare.models import ANDROID_PACKAGES, DispatchAction, FareQuote, ProviderId, TripRequest

logger = logging.getLogger(__name__)

PLAY_STORE_URL = "https://play.google.com/store/apps/details?id={package}"
WHATSAPP_URL = "https://wa.me/{phone}?text={text}"

# Matches JavaScript's encodeURIComponent, which the apps decode with.
_URI_COMPONENT_SAFE = "!'()*"


def encode_component(value: str) -> str:
    return quote(value, safe=_URI_COMPONENT_SAFE)


def _uber_link(trip: TripRequest) -> str:
    o, d = trip.origin, trip.destination
    link = (
        f"uber://?action=setPickup"
        f"&pickup[latitude]={o.latitude}&pickup[longitude]={o.longitude}"
        f"&dropoff[latitude]={d.latitude}&dropoff[longitude]={d.longitude}"
    )
    if trip.origin_address:
        link += f"&pickup[formatted_address]={encode_component(trip.origin_address)}"
    if trip.destination_address:
        link += f"&dropoff[formatted_address]={encode_component(trip.destination_address)}"
    return link


def _careem_link(trip: TripRequest) -> str:
    o, d = trip.origin, trip.destination
    return (
        f"careem://booking?pickup_lat={o.latitude}&pickup_lng={o.longitude}"
        f"&dropoff_lat={d.latitude}&dropoff_lng={d.longitude}"
    )


DEEP_LINK_BUILDERS = {
    ProviderId.UBER: _uber_link,
    ProviderId.CAREEM: _careem_link,
}


def booking_message(quote: FareQuote, trip: TripRequest) -> str:
    """Text pre-filled into the chat with an independent driver."""
    return (
        "Hello, I would like to book a ride via GO-ON\n"
        f"From: {trip.origin_address or _coords(trip.origin.latitude, trip.origin.longitude)}\n"
        f"To: {trip.destination_address or _coords(trip.destination.latitude, trip.destination.longitude)}\n"
        f"Expected price: {quote.price:.0f} {quote.currency}"
    )


def _coords(lat: float, lon: float) -> str:
    return f"{lat},{lon}"


def whatsapp_link(phone: str, message: str) -> str | None:
    digits = re.sub(r"\D", "", phone)
    if not digits:
        return None
    return WHATSAPP_URL.format(phone=digits, text=encode_component(message))


class DeepLinkResolver:
    """Resolves the dispatch action for a selected offer. Never raises."""

    def resolve(self, quote: FareQuote, trip: TripRequest) -> DispatchAction:
        provider_id = quote.provider_id
        try:
            if provider_id is ProviderId.INDEPENDENT:
                return self._independent_action(quote, trip)

            builder = DEEP_LINK_BUILDERS.get(provider_id)
            if builder is not None:
                return DispatchAction(
                    provider_id=provider_id,
                    kind="deep_link",
                    uri=builder(trip),
                    package_name=ANDROID_PACKAGES.get(provider_id),
                    store_url=self.store_url(provider_id),
                )
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("Could not build deep link for %s: %s", provider_id.value, e)

        return self.app_launch(provider_id)

    def app_launch(self, provider_id: ProviderId) -> DispatchAction:
        """No link available: the caller opens the app (or its store page)."""
        return DispatchAction(
            provider_id=provider_id,
            kind="app_launch",
            package_name=ANDROID_PACKAGES.get(provider_id),
            store_url=self.store_url(provider_id),
        )

    def store_url(self, provider_id: ProviderId) -> str | None:
        package = ANDROID_PACKAGES.get(provider_id)
        return PLAY_STORE_URL.format(package=package) if package else None

    def _independent_action(self, quote: FareQuote, trip: TripRequest) -> DispatchAction:
        uri = whatsapp_link(quote.driver_phone or "", booking_message(quote, trip))
        if uri is None:
            return self.app_launch(ProviderId.INDEPENDENT)
        return DispatchAction(provider_id=ProviderId.INDEPENDENT, kind="whatsapp", uri=uri)
