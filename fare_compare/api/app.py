"""FastAPI application factory for the fare comparison service."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from fare_compare import __version__
from fare_compare.api.middleware.security_headers import SecurityHeadersMiddleware
from fare_compare.api.rate_limit import limiter, rate_limit_exceeded_handler
from fare_compare.api.routes import comparisons
from fare_compare.core.exceptions import ValidationError
from fare_compare.engine import FareComparisonEngine, create_engine
from fare_compare.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    engine: FareComparisonEngine | None = None,
) -> FastAPI:
    """Create FastAPI application with injected dependencies.

    Args:
        settings: Loaded settings; read from the environment when omitted
        engine: Prebuilt engine; otherwise built from settings at startup
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Build the engine on startup unless one was injected."""
        if app.state.engine is None:
            app.state.engine = await create_engine(settings)
            logger.info("Fare comparison engine ready")
        yield

    app = FastAPI(
        title="Fare Comparison API",
        version=__version__,
        description="Ranks ride-hailing offers for a trip and resolves how to book them",
        lifespan=lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # Set immediately (not in lifespan) so they're available for testing
    app.state.settings = settings
    app.state.engine = engine

    @app.exception_handler(ValidationError)
    async def trip_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"error": exc.message, "details": exc.details},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors.origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(comparisons.router, tags=["comparisons"])

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint for monitoring (unauthenticated for infrastructure)."""
        return {"status": "ok"}

    return app
