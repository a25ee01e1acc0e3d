"""Process-wide collaborators shared by the pages."""

from __future__ import annotations

from apps.tracking_console.core.client import AsyncTrackingClient
from apps.tracking_console.core.resources import TrackingResources

_resources: TrackingResources | None = None


def get_resources() -> TrackingResources:
    global _resources
    if _resources is None:
        _resources = TrackingResources(AsyncTrackingClient.get())
    return _resources


__all__ = ["get_resources"]
