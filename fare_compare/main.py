"""Fare comparison service entry point."""

import logging

import uvicorn

from fare_compare.api.app import create_app
from fare_compare.compare_logging import setup_logging
from fare_compare.settings import get_settings

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    setup_logging(
        level=settings.engine.log_level,
        json_output=settings.engine.log_format == "json",
        environment=settings.engine.environment,
    )

    if not settings.api.key:
        logger.warning("API_KEY is not set, every authenticated request will fail")

    app = create_app(settings)

    logger.info("Starting fare comparison service on port %d", settings.api.port)
    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.engine.log_level.lower(),
    )


if __name__ == "__main__":
    main()
