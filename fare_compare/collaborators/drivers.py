"""Boundary to the nearby independent driver lookup."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import pydantic

from fare_compare.core.exceptions import DriverLookupError
from fare_compare.core.retry import RetryConfig, with_retry
from fare_compare.models import DriverCandidate, Location

logger = logging.getLogger(__name__)

# Served in place of real candidates when the lookup fails.
PLACEHOLDER_DRIVERS: tuple[DriverCandidate, ...] = (
    DriverCandidate(
        id="placeholder-1",
        name="Ahmed Mohamed",
        rating=4.8,
        total_rides=230,
        distance_km=0.5,
        vehicle_type="car",
        vehicle_make="Toyota",
        vehicle_model="Corolla",
        vehicle_color="white",
    ),
    DriverCandidate(
        id="placeholder-2",
        name="Mahmoud Ali",
        rating=4.9,
        total_rides=180,
        distance_km=1.2,
        vehicle_type="car",
        vehicle_make="Hyundai",
        vehicle_model="Elantra",
        vehicle_color="silver",
    ),
)


class NearbyDriverLookup(Protocol):
    async def find_nearby_drivers(
        self, origin: Location, radius_km: float
    ) -> list[DriverCandidate]: ...


@dataclass(frozen=True)
class DriverLookupResult:
    """Outcome of one lookup call: the candidates, or the reason it failed."""

    candidates: tuple[DriverCandidate, ...] = ()
    error: str | None = None
    failed: bool = False

    @classmethod
    def ok(cls, candidates: Iterable[DriverCandidate]) -> "DriverLookupResult":
        return cls(candidates=tuple(candidates))

    @classmethod
    def failure(cls, error: str) -> "DriverLookupResult":
        return cls(error=error, failed=True)


class StaticDriverLookup:
    def __init__(self, candidates: Iterable[DriverCandidate] = ()) -> None:
        self._candidates = tuple(candidates)

    async def find_nearby_drivers(
        self, origin: Location, radius_km: float
    ) -> list[DriverCandidate]:
        return [c for c in self._candidates if c.distance_km <= radius_km]


def row_to_candidate(row: Mapping[str, Any]) -> DriverCandidate:
    """Map a find_nearby_drivers row (or a drivers+vehicles row) to a candidate."""
    vehicle = row.get("vehicles")
    if isinstance(vehicle, list):
        vehicle = vehicle[0] if vehicle else None
    vehicle = vehicle or {}

    return DriverCandidate(
        id=str(row.get("driver_id") or row["id"]),
        name=str(row.get("name") or ""),
        phone=str(row.get("whatsapp_number") or row.get("phone") or ""),
        rating=float(row["rating"]) if row.get("rating") is not None else 5.0,
        total_rides=int(row.get("total_rides") or 0),
        distance_km=float(row.get("distance_km") or 0.0),
        vehicle_type=row.get("vehicle_type") or vehicle.get("type"),
        vehicle_make=row.get("vehicle_make") or vehicle.get("make"),
        vehicle_model=row.get("vehicle_model") or vehicle.get("model"),
        vehicle_color=row.get("vehicle_color") or vehicle.get("color"),
        plate_number=row.get("plate_number") or vehicle.get("plate_number"),
    )


class HttpNearbyDriverLookup:
    """Calls the find_nearby_drivers RPC of the driver database."""

    RPC_PATH = "/rest/v1/rpc/find_nearby_drivers"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 2.5,
        retry_config: RetryConfig | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig(max_attempts=2)

    async def find_nearby_drivers(
        self, origin: Location, radius_km: float
    ) -> list[DriverCandidate]:
        rows = await with_retry(
            lambda: self._call_rpc(origin, radius_km),
            self.retry_config,
            operation_name="nearby driver lookup",
        )

        candidates = []
        for row in rows:
            try:
                candidates.append(row_to_candidate(row))
            except (KeyError, TypeError, ValueError, pydantic.ValidationError) as e:
                logger.warning("Skipping malformed driver row: %s", e)
        return candidates

    async def _call_rpc(self, origin: Location, radius_km: float) -> list[dict[str, Any]]:
        body = {
            "user_location": f"POINT({origin.longitude} {origin.latitude})",
            "radius_km": radius_km,
            "service_type": "rides",
        }
        headers = {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}{self.RPC_PATH}", json=body, headers=headers
                )

                if response.status_code >= 400:
                    raise DriverLookupError(
                        f"Driver lookup error: {response.status_code}",
                        details={"status_code": response.status_code},
                    )

                data = response.json()
        except httpx.TimeoutException as e:
            raise DriverLookupError(f"Request timed out after {self.timeout}s") from e
        except httpx.TransportError as e:
            raise DriverLookupError(f"Network error: {e}") from e
        except ValueError as e:
            raise DriverLookupError(f"Malformed driver lookup response: {e}") from e

        if data is None:
            return []
        if not isinstance(data, list):
            raise DriverLookupError("Driver lookup response is not a list")
        return [row for row in data if isinstance(row, dict)]
