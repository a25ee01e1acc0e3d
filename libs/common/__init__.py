"""Common utilities and exceptions."""

from libs.common.exceptions import (
    ApiError,
    ConfigurationError,
    LoginError,
    TrackingConsoleError,
    Unauthorized,
)

__all__ = [
    "ApiError",
    "ConfigurationError",
    "LoginError",
    "TrackingConsoleError",
    "Unauthorized",
]
