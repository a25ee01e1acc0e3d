"""View-owned snapshots refreshed by the poller."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Generic, TypeVar

from apps.tracking_console.core.poller import Poller, Subscription

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class PolledSnapshot(Generic[_T]):
    """Latest result of one fetch, replaced wholesale on every refresh.

    A refresh that completes after its subscription was cancelled is discarded.
    Errors are passed to ``on_error`` (if any) and re-raised so the poller can
    log them and keep its schedule.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[_T]],
        *,
        name: str,
        on_change: Callable[[_T], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self.fetch = fetch
        self.name = name
        self.on_change = on_change
        self.on_error = on_error
        self.value: _T | None = None
        self.generation = 0
        self.updated_at: datetime | None = None
        self.subscription: Subscription | None = None
        self._refreshing: set[Subscription | None] = set()

    @property
    def loaded(self) -> bool:
        return self.generation > 0

    def attach(self, poller: Poller, interval: float) -> Subscription:
        self.subscription = poller.subscribe(interval, self.refresh, name=self.name)
        return self.subscription

    def detach(self, poller: Poller) -> None:
        if self.subscription is not None:
            poller.unsubscribe(self.subscription)

    async def refresh(self, sub: Subscription | None = None) -> bool:
        """Fetch and replace the snapshot.

        Returns False when nothing was committed: a refresh for the same
        subscription was already running (manual refresh racing a poll tick), or
        the subscription was cancelled while the fetch was in flight. A fetch
        still running for a detached subscription does not hold back the next one.
        """
        owner = sub if sub is not None else self.subscription
        if owner in self._refreshing:
            return False
        self._refreshing.add(owner)
        try:
            value = await self.fetch()
        except Exception as exc:
            if self.on_error is not None and (owner is None or owner.active):
                self.on_error(exc)
            raise
        finally:
            self._refreshing.discard(owner)

        if owner is not None and not owner.active:
            logger.debug("stale_snapshot_discarded", extra={"snapshot": self.name})
            return False

        self.value = value
        self.generation += 1
        self.updated_at = datetime.now(UTC)
        if self.on_change is not None:
            self.on_change(value)
        return True


__all__ = ["PolledSnapshot"]
