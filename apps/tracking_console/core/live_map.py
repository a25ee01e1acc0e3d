"""Live map view model: device and position snapshots plus projected markers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from apps.tracking_console import config
from apps.tracking_console.core.poller import Poller
from apps.tracking_console.core.projector import LiveMapProjector, Marker
from apps.tracking_console.core.resources import TrackingResources
from apps.tracking_console.core.snapshot import PolledSnapshot
from apps.tracking_console.schemas import Device, Position

logger = logging.getLogger(__name__)


class LiveMapModel:
    """Keeps the map's markers in step with the latest snapshots.

    Devices and positions refresh on independent subscriptions, so a slow device
    list never delays positions. Every snapshot replacement triggers a new
    projection pass over the current pair of snapshots.
    """

    def __init__(
        self,
        resources: TrackingResources,
        poller: Poller,
        *,
        width: float | None = None,
        height: float | None = None,
        on_markers: Callable[[list[Marker]], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self.poller = poller
        self.projector = LiveMapProjector(
            width if width is not None else config.MAP_WIDTH,
            height if height is not None else config.MAP_HEIGHT,
        )
        self.on_markers = on_markers
        self.devices: PolledSnapshot[list[Device]] = PolledSnapshot(
            resources.list_devices,
            name="map_devices",
            on_change=lambda _: self._reproject(),
            on_error=on_error,
        )
        self.positions: PolledSnapshot[list[Position]] = PolledSnapshot(
            resources.latest_positions,
            name="map_positions",
            on_change=lambda _: self._reproject(),
            on_error=on_error,
        )
        self.markers: list[Marker] = []

    @property
    def loaded(self) -> bool:
        return self.devices.loaded and self.positions.loaded

    @property
    def device_map(self) -> dict[int, Device]:
        return {device.id: device for device in self.devices.value or []}

    @property
    def position_count(self) -> int:
        return len(self.positions.value or [])

    def start(
        self,
        device_interval: float | None = None,
        position_interval: float | None = None,
    ) -> None:
        self.devices.attach(
            self.poller,
            device_interval if device_interval is not None else config.DEVICE_REFRESH_SECONDS,
        )
        self.positions.attach(
            self.poller,
            position_interval if position_interval is not None else config.POSITION_REFRESH_SECONDS,
        )

    def stop(self) -> None:
        self.devices.detach(self.poller)
        self.positions.detach(self.poller)

    async def refresh_now(self) -> None:
        """Manual refresh of both snapshots (the Refresh button)."""
        await asyncio.gather(self.devices.refresh(), self.positions.refresh())

    def resize(self, width: float, height: float) -> None:
        self.projector.resize(width, height)
        self._reproject()

    def toggle_tooltip(self, device_id: int) -> None:
        if self.projector.toggle_tooltip(device_id) is not None:
            self.markers = self.projector.markers
            self._emit()

    def _reproject(self) -> None:
        self.markers = self.projector.project(self.device_map, self.positions.value or [])
        diff = self.projector.last_diff
        if diff.changed:
            logger.debug(
                "markers_reconciled",
                extra={
                    "created": len(diff.created),
                    "updated": len(diff.updated),
                    "removed": len(diff.removed),
                },
            )
        self._emit()

    def _emit(self) -> None:
        if self.on_markers is not None:
            self.on_markers(self.markers)


__all__ = ["LiveMapModel"]
