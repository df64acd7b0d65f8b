"""Exception hierarchy for the fare comparison engine."""

from typing import Any


class FareCompareError(Exception):
    """Base exception for all fare comparison errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransientError(FareCompareError):
    """Errors that may succeed on retry."""

    pass


class NetworkError(TransientError):
    """Network-related transient errors (timeout, connection refused)."""

    pass


class ServiceUnavailableError(TransientError):
    """External collaborator temporarily unavailable (5xx responses)."""

    pass


class CaptureUnavailableError(ServiceUnavailableError):
    """The price capture bridge could not be reached or returned garbage."""

    pass


class DriverLookupError(ServiceUnavailableError):
    """The nearby driver lookup failed."""

    pass


class PermanentError(FareCompareError):
    """Errors that will not succeed on retry."""

    pass


class ValidationError(PermanentError):
    """Invalid input or data format."""

    pass


class InvalidLocationError(ValidationError):
    """Coordinates outside the valid latitude/longitude range."""

    pass


class IncompleteTripRequestError(ValidationError):
    """Origin or destination missing, so no trip request can be built."""

    pass
