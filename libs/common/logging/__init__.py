"""Structured JSON logging for the tracking console.

Usage:
    # At startup
    from libs.common.logging import configure_logging
    configure_logging(service_name="tracking_console", log_level="INFO")

    # Around one unit of work (a poll tick, a page action)
    from libs.common.logging import LogContext
    with LogContext():
        logger.info("devices_refreshed", extra={"count": 12})
"""

from libs.common.logging.config import TraceIDFilter, configure_logging, get_logger
from libs.common.logging.context import (
    LogContext,
    clear_trace_id,
    generate_trace_id,
    get_trace_id,
    set_trace_id,
)
from libs.common.logging.formatter import JSONFormatter

__all__ = [
    "configure_logging",
    "get_logger",
    "TraceIDFilter",
    "generate_trace_id",
    "get_trace_id",
    "set_trace_id",
    "clear_trace_id",
    "LogContext",
    "JSONFormatter",
]
