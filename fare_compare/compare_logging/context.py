"""Per-task logging context for adding fields to log records.

Comparisons run concurrently on one event loop, so the context lives in a
ContextVar rather than thread-local storage.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any] | None] = ContextVar("log_context", default=None)


class LogContext:
    """Task-local storage for log context fields."""

    @classmethod
    def set(cls, **kwargs: Any) -> None:
        _log_context.set({**cls.get(), **kwargs})

    @classmethod
    def get(cls) -> dict[str, Any]:
        return dict(_log_context.get() or {})

    @classmethod
    def clear(cls) -> None:
        _log_context.set(None)


class ContextFilter(logging.Filter):
    """Injects LogContext fields into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in LogContext.get().items():
            if not hasattr(record, key) or getattr(record, key) == "-":
                setattr(record, key, value)
        return True


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Context manager that sets logging context fields.

    Fields are injected into log records via ContextFilter, which must
    be attached to the handler (see setup_logging). The previous context
    is restored on exit, so nested blocks do not leak fields.
    """
    token = _log_context.set({**LogContext.get(), **kwargs})
    try:
        yield
    finally:
        _log_context.reset(token)


@contextmanager
def log_comparison_context(comparison_id: str, **kwargs: Any) -> Iterator[None]:
    """Convenience context manager for a single fare comparison."""
    correlation_id = kwargs.pop("correlation_id", comparison_id)
    with log_context(comparison_id=comparison_id, correlation_id=correlation_id, **kwargs):
        yield
