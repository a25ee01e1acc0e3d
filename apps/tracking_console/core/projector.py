"""Projection of device positions onto the live map container.

The mapping is a linear equirectangular approximation, not a geographic
projection: longitude spans the container width and latitude its height.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace

from apps.tracking_console.schemas import Device, Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Marker:
    deviceId: int
    screenX: float
    screenY: float
    tooltipOpen: bool = False


@dataclass(frozen=True)
class MarkerDiff:
    """Keys touched by one projection pass."""

    created: frozenset[int] = field(default_factory=frozenset)
    updated: frozenset[int] = field(default_factory=frozenset)
    removed: frozenset[int] = field(default_factory=frozenset)

    @property
    def changed(self) -> bool:
        return bool(self.created or self.updated or self.removed)


def to_screen(latitude: float, longitude: float, width: float, height: float) -> tuple[float, float]:
    x = (longitude + 180.0) / 360.0 * width
    y = (90.0 - latitude) / 180.0 * height
    return x, y


class LiveMapProjector:
    """Reconciles markers against the previous pass.

    Markers are keyed by device id. ``tooltipOpen`` survives position updates
    for the same device and starts closed for devices that appear.
    """

    def __init__(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self._markers: dict[int, Marker] = {}
        self.last_diff = MarkerDiff()

    @property
    def markers(self) -> list[Marker]:
        return list(self._markers.values())

    def resize(self, width: float, height: float) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("map dimensions must be positive")
        self.width = width
        self.height = height

    def project(
        self, devices: Mapping[int, Device], positions: Sequence[Position]
    ) -> list[Marker]:
        next_markers: dict[int, Marker] = {}
        dropped = 0
        for position in positions:
            if position.deviceId not in devices:
                dropped += 1
                continue
            x, y = to_screen(position.latitude, position.longitude, self.width, self.height)
            previous = self._markers.get(position.deviceId)
            tooltip_open = previous.tooltipOpen if previous is not None else False
            next_markers[position.deviceId] = Marker(
                deviceId=position.deviceId,
                screenX=x,
                screenY=y,
                tooltipOpen=tooltip_open,
            )

        if dropped:
            logger.debug("positions_without_device_dropped", extra={"count": dropped})

        previous_keys = set(self._markers)
        next_keys = set(next_markers)
        self.last_diff = MarkerDiff(
            created=frozenset(next_keys - previous_keys),
            updated=frozenset(
                key
                for key in next_keys & previous_keys
                if next_markers[key] != self._markers[key]
            ),
            removed=frozenset(previous_keys - next_keys),
        )
        self._markers = next_markers
        return self.markers

    def toggle_tooltip(self, device_id: int) -> Marker | None:
        """Flip ``tooltipOpen`` for one marker. Returns the new marker, if any."""
        marker = self._markers.get(device_id)
        if marker is None:
            return None
        toggled = replace(marker, tooltipOpen=not marker.tooltipOpen)
        self._markers[device_id] = toggled
        return toggled


__all__ = ["LiveMapProjector", "Marker", "MarkerDiff", "to_screen"]
