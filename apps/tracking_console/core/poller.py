"""Recurring refresh driver for console views.

Each subscription owns one timer task. A tick starts the callback only when the
previous invocation of the same subscription has finished; otherwise the tick
is skipped. Callback errors are logged and the schedule keeps running.

State per subscription::

    IDLE -> SCHEDULED -> RUNNING -> SCHEDULED -> ... -> CANCELLED
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from libs.common.logging import LogContext

logger = logging.getLogger(__name__)

PollCallback = Callable[["Subscription"], Awaitable[Any] | Any]


class SubscriptionState(str, Enum):
    IDLE = "idle"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    CANCELLED = "cancelled"


@dataclass(eq=False)
class Subscription:
    """Handle returned by ``Poller.subscribe``.

    Callbacks receive their own subscription and must check ``active`` before
    committing results: an invocation that was in flight during ``unsubscribe``
    still runs to completion.
    """

    name: str
    interval: float
    callback: PollCallback
    state: SubscriptionState = SubscriptionState.IDLE
    in_flight: bool = False
    runs: int = 0
    failures: int = 0
    skipped_ticks: int = 0
    _timer_task: asyncio.Task[None] | None = field(default=None, repr=False)
    _call_task: asyncio.Task[None] | None = field(default=None, repr=False)

    @property
    def active(self) -> bool:
        return self.state is not SubscriptionState.CANCELLED


class Poller:
    """Owns the subscriptions of one view (one browser client)."""

    def __init__(self, shutdown_timeout: float = 5.0) -> None:
        self.shutdown_timeout = shutdown_timeout
        self._subscriptions: set[Subscription] = set()

    @property
    def subscriptions(self) -> frozenset[Subscription]:
        return frozenset(self._subscriptions)

    def subscribe(
        self, interval: float, callback: PollCallback, *, name: str = "subscription"
    ) -> Subscription:
        """Run ``callback`` now and then every ``interval`` seconds.

        Must be called from within a running event loop.
        """
        if interval <= 0:
            raise ValueError("interval must be positive")
        sub = Subscription(name=name, interval=interval, callback=callback)
        self._subscriptions.add(sub)
        sub._timer_task = asyncio.create_task(self._run(sub), name=f"poller:{name}")
        logger.debug("poll_subscribed", extra={"subscription": name, "interval": interval})
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        """Stop the timer. An in-flight callback finishes but sees ``active=False``."""
        if not sub.active:
            return
        sub.state = SubscriptionState.CANCELLED
        self._subscriptions.discard(sub)
        if sub._timer_task is not None and not sub._timer_task.done():
            sub._timer_task.cancel()
        logger.debug(
            "poll_unsubscribed",
            extra={"subscription": sub.name, "runs": sub.runs, "in_flight": sub.in_flight},
        )

    async def shutdown(self) -> None:
        """Unsubscribe everything and wait briefly for in-flight callbacks."""
        subs = list(self._subscriptions)
        for sub in subs:
            self.unsubscribe(sub)

        pending = [
            sub._call_task
            for sub in subs
            if sub._call_task is not None and not sub._call_task.done()
        ]
        if not pending:
            return
        _done, still_running = await asyncio.wait(pending, timeout=self.shutdown_timeout)
        for task in still_running:
            logger.warning("poll_callback_shutdown_timeout", extra={"task": task.get_name()})
            task.cancel()

    async def _run(self, sub: Subscription) -> None:
        if not sub.active:
            return
        loop = asyncio.get_running_loop()
        sub.state = SubscriptionState.SCHEDULED
        self._fire(sub)
        next_tick = loop.time() + sub.interval
        try:
            while sub.active:
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
                next_tick += sub.interval
                if not sub.active:
                    break
                self._fire(sub)
        except asyncio.CancelledError:
            return

    def _fire(self, sub: Subscription) -> None:
        if sub.in_flight:
            sub.skipped_ticks += 1
            logger.debug("poll_tick_skipped", extra={"subscription": sub.name})
            return
        sub.in_flight = True
        sub.state = SubscriptionState.RUNNING
        sub._call_task = asyncio.create_task(self._invoke(sub), name=f"poll:{sub.name}")

    async def _invoke(self, sub: Subscription) -> None:
        started = time.perf_counter()
        with LogContext():
            try:
                result = sub.callback(sub)
                if inspect.isawaitable(result):
                    await result
                sub.runs += 1
                logger.debug(
                    "poll_tick_completed",
                    extra={
                        "subscription": sub.name,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 1),
                    },
                )
            except Exception:
                sub.failures += 1
                logger.exception("poll_callback_failed", extra={"subscription": sub.name})
            finally:
                sub.in_flight = False
                if sub.active:
                    sub.state = SubscriptionState.SCHEDULED


__all__ = ["PollCallback", "Poller", "Subscription", "SubscriptionState"]
