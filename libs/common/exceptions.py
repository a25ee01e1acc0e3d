"""
Exception hierarchy for the tracking console.

Errors raised by the request pipeline are organized so callers can tell
"re-authenticate" apart from "the backend rejected this request" and from
"the login attempt itself failed".
"""

from __future__ import annotations


class TrackingConsoleError(Exception):
    """
    Base exception for all tracking console errors.

    Example:
        >>> try:
        ...     await resources.list_devices()
        ... except TrackingConsoleError as e:
        ...     logger.error(f"Console error: {e}")
    """

    pass


class ApiError(TrackingConsoleError):
    """
    Raised when the backend answers with a non-2xx status other than 401.

    The raw response text is kept in ``body`` for display; it is not parsed.

    Example:
        >>> raise ApiError(400, "Duplicate unique id")
    """

    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(f"API error ({status}): {body}")


class Unauthorized(ApiError):
    """
    Raised when the backend answers 401.

    The session store has already been cleared when this is raised. Callers
    must send the operator back to the login page; nothing is retried.
    """

    def __init__(self, body: str = "") -> None:
        super().__init__(401, body)
        self.args = ("Unauthorized. Please log in again.",)


class LoginError(TrackingConsoleError):
    """
    Raised when a login attempt does not yield a session token.

    Covers both a non-2xx answer from the session endpoint and a 2xx answer
    without an extractable token. Never raised for requests made after login.
    """

    def __init__(self, reason: str, status: int | None = None) -> None:
        self.reason = reason
        self.status = status
        super().__init__(reason)


class ConfigurationError(TrackingConsoleError):
    """
    Raised when required configuration is missing or malformed.

    Example:
        >>> if backend not in {"app", "redis"}:
        ...     raise ConfigurationError("TOKEN_STORAGE_BACKEND must be app or redis")
    """

    pass
