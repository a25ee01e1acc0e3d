"""Trace IDs carried through async contexts.

A trace ID groups the log lines of one unit of work, such as a single poll
tick that fetches positions and re-projects the map markers. asyncio tasks
copy the current context when created, so concurrent ticks never share an ID.
"""

import contextvars
import uuid
from types import TracebackType

_trace_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("trace_id", default=None)


def generate_trace_id() -> str:
    """Return a new 16-character hex trace ID."""
    return uuid.uuid4().hex[:16]


def get_trace_id() -> str | None:
    return _trace_id_var.get()


def set_trace_id(trace_id: str) -> contextvars.Token[str | None]:
    """Bind ``trace_id`` to the current context.

    Returns the token that ``LogContext`` uses to restore the outer value.

    Raises:
        ValueError: If trace_id is empty
    """
    if not trace_id:
        raise ValueError("Trace ID cannot be empty")
    return _trace_id_var.set(trace_id)


def clear_trace_id() -> None:
    _trace_id_var.set(None)


class LogContext:
    """Bind a trace ID for the duration of a ``with`` block.

    Example:
        >>> with LogContext() as trace_id:
        ...     logger.info("positions_refreshed", extra={"count": 3})
    """

    def __init__(self, trace_id: str | None = None) -> None:
        self.trace_id = trace_id or generate_trace_id()
        self._token: contextvars.Token[str | None] | None = None

    def __enter__(self) -> str:
        self._token = set_trace_id(self.trace_id)
        return self.trace_id

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _trace_id_var.reset(self._token)
            self._token = None
