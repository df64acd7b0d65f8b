from .context import ContextFilter, LogContext, log_comparison_context, log_context
from .filters import DefaultCorrelationFilter, PIIFilter
from .formatters import DevFormatter, JSONFormatter
from .setup import get_logger, setup_logging

__all__ = [
    "ContextFilter",
    "DefaultCorrelationFilter",
    "DevFormatter",
    "JSONFormatter",
    "LogContext",
    "PIIFilter",
    "get_logger",
    "log_comparison_context",
    "log_context",
    "setup_logging",
]
