"""Root logger setup for the console process.

Example:
    >>> from libs.common.logging.config import configure_logging
    >>> logger = configure_logging(service_name="tracking_console", log_level="DEBUG")
    >>> logger.info("console_started", extra={"port": 8080})
"""

import logging
import sys

from libs.common.logging.context import get_trace_id
from libs.common.logging.formatter import JSONFormatter


class TraceIDFilter(logging.Filter):
    """Stamp every record with the trace ID of the current async context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    include_context: bool = True,
) -> logging.Logger:
    """Configure JSON logging on stdout for the whole process.

    Replaces any handlers already attached to the root logger, so calling
    this twice does not duplicate output.

    Args:
        service_name: Value of the ``service`` field in every log line
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        include_context: Whether ``extra`` fields are emitted under ``context``

    Returns:
        The configured root logger

    Raises:
        ValueError: If log_level is not a known level name
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(
        JSONFormatter(service_name=service_name, include_context=include_context)
    )
    handler.addFilter(TraceIDFilter())
    root_logger.addHandler(handler)

    # httpx logs every request at INFO; keep it out of the console log unless debugging
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    return root_logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger by name (typically ``__name__``)."""
    return logging.getLogger(name)
