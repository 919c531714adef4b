"""Observability module for tasklane.

Provides structured logging with store/operation context:
- JSON formatter for log collectors
- Console formatter for development
"""

from tasklane.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
    operation_var,
    store_var,
)

__all__ = [
    "configure_logging",
    "ConsoleFormatter",
    "JsonFormatter",
    "LogContext",
    "operation_var",
    "store_var",
]
