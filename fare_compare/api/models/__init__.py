"""Pydantic models for API requests and responses."""

from fare_compare.api.models.comparison import (
    ComparisonRequest,
    ComparisonResponse,
    Coordinates,
    DispatchRequest,
    RerankRequest,
)

__all__ = [
    "ComparisonRequest",
    "ComparisonResponse",
    "Coordinates",
    "DispatchRequest",
    "RerankRequest",
]
