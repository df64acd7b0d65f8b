"""Core utilities for the fare comparison engine."""

from .exceptions import (
    CaptureUnavailableError,
    DriverLookupError,
    FareCompareError,
    IncompleteTripRequestError,
    InvalidLocationError,
    NetworkError,
    PermanentError,
    ServiceUnavailableError,
    TransientError,
    ValidationError,
)
from .retry import RetryConfig, with_retry

__all__ = [
    "FareCompareError",
    "TransientError",
    "NetworkError",
    "ServiceUnavailableError",
    "CaptureUnavailableError",
    "DriverLookupError",
    "PermanentError",
    "ValidationError",
    "InvalidLocationError",
    "IncompleteTripRequestError",
    "RetryConfig",
    "with_retry",
]
