"""Rate limiting configuration using slowapi."""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = {"second": 1, "minute": 60, "hour": 3600, "day": 86400}


def get_api_key_or_ip(request: Request) -> str:
    """Rate limit by API key if present, otherwise by IP."""
    api_key = request.headers.get("X-API-Key")
    if api_key:
        return f"key:{api_key}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=get_api_key_or_ip)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 with a Retry-After header.

    Built by hand because slowapi's headers_enabled=True needs
    SlowAPIMiddleware, which the decorator-based routes do not use.
    """
    logger.warning("Rate limit hit: %s %s (%s)", request.method, request.url.path, exc.detail)

    retry_after = "60"
    for unit, seconds in _WINDOW_SECONDS.items():
        if unit in str(exc.detail):
            retry_after = str(seconds)
            break

    response = JSONResponse(status_code=429, content={"error": str(exc.detail)})
    response.headers["retry-after"] = retry_after
    return response
