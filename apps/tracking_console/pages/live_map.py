"""Live tracking page: device markers on a simplified equirectangular map."""

from __future__ import annotations

import logging
from typing import Any

from nicegui import ui

from apps.tracking_console import config
from apps.tracking_console.core.dependencies import get_resources
from apps.tracking_console.core.live_map import LiveMapModel
from apps.tracking_console.core.projector import Marker
from apps.tracking_console.schemas import Device, Position
from apps.tracking_console.ui.layout import (
    main_layout,
    page_poller,
    report_error,
    requires_session,
)
from apps.tracking_console.utils.formatters import format_speed, format_timestamp

logger = logging.getLogger(__name__)

_MARKER_STYLE = (
    "position:absolute;width:20px;height:20px;border-radius:50%;"
    "transform:translate(-50%,-50%);cursor:pointer;box-shadow:0 0 0 2px white;"
    "background-color:var(--q-primary);z-index:10;"
)

# Reports the container size on first layout and on every change after it.
_RESIZE_OBSERVER_JS = """
(() => {{
  const el = document.getElementById("{html_id}");
  if (!el) return;
  const emit = () => el.dispatchEvent(new CustomEvent("mapresize", {{
    detail: {{width: el.clientWidth, height: el.clientHeight}},
  }}));
  new ResizeObserver(emit).observe(el);
}})();
"""


def container_size(event_args: Any) -> tuple[float, float] | None:
    """Width and height from a ``mapresize`` event, or None if unusable."""
    detail = event_args.get("detail") if isinstance(event_args, dict) else None
    if not isinstance(detail, dict):
        return None
    try:
        width = float(detail["width"])
        height = float(detail["height"])
    except (KeyError, TypeError, ValueError):
        return None
    if width <= 0 or height <= 0:
        return None
    return width, height


def tooltip_lines(device: Device, position: Position | None) -> list[str]:
    lines = [device.name]
    if position is not None:
        lines.append(f"Speed: {format_speed(position.speed)}")
        lines.append(f"Last update: {format_timestamp(position.deviceTime)}")
    return lines


class MarkerLayer:
    """Keeps one NiceGUI element per marker, diffed against the last render."""

    def __init__(self, container: ui.element, model: LiveMapModel) -> None:
        self.container = container
        self.model = model
        self._elements: dict[int, ui.element] = {}

    def render(self, markers: list[Marker]) -> None:
        devices = self.model.device_map
        latest = {p.deviceId: p for p in self.model.positions.value or []}
        wanted = {marker.deviceId: marker for marker in markers}

        for device_id in list(self._elements):
            if device_id not in wanted:
                self._elements.pop(device_id).delete()

        for device_id, marker in wanted.items():
            element = self._elements.get(device_id)
            if element is None:
                with self.container:
                    element = ui.element("div").on(
                        "click", lambda _, key=device_id: self.model.toggle_tooltip(key)
                    )
                self._elements[device_id] = element
            element.style(
                replace=f"{_MARKER_STYLE}left:{marker.screenX:.1f}px;top:{marker.screenY:.1f}px;"
            )
            element.clear()
            if marker.tooltipOpen and device_id in devices:
                with element:
                    with ui.card().classes("absolute bottom-6 -left-20 w-44 p-2 text-xs"):
                        for line in tooltip_lines(devices[device_id], latest.get(device_id)):
                            ui.label(line)


@ui.page("/map")
@requires_session
@main_layout
async def live_map_page() -> None:
    poller = page_poller()

    with ui.row().classes("w-full items-center justify-between"):
        ui.label("Live Tracking").classes("text-2xl font-semibold")
        refresh_button = ui.button("Refresh", icon="refresh").props("outline")

    count_label = ui.label("Device Locations (0)").classes("text-base font-medium")
    empty_label = ui.label("No active devices to display").classes("text-gray-500")
    container = (
        ui.element("div")
        .classes("relative w-full bg-gray-100 rounded overflow-hidden")
        .style(f"height:{config.MAP_HEIGHT:.0f}px")
    )

    layer: MarkerLayer | None = None

    def on_markers(markers: list[Marker]) -> None:
        count_label.set_text(f"Device Locations ({model.position_count})")
        empty_label.set_visibility(model.loaded and not markers)
        if layer is not None:
            layer.render(markers)

    model = LiveMapModel(
        get_resources(),
        poller,
        on_markers=on_markers,
        on_error=lambda exc: report_error(exc, "load map data"),
    )
    layer = MarkerLayer(container, model)
    empty_label.set_visibility(False)

    async def manual_refresh() -> None:
        try:
            await model.refresh_now()
        except Exception:
            # on_error has already notified the operator
            logger.debug("map_manual_refresh_failed", exc_info=True)

    def on_container_resize(event: Any) -> None:
        size = container_size(event.args)
        if size is None or size == (model.projector.width, model.projector.height):
            return
        model.resize(*size)

    container.on("mapresize", on_container_resize, args=["detail"], throttle=0.2)
    refresh_button.on_click(manual_refresh)
    model.start()

    ui.timer(
        0.1,
        lambda: ui.run_javascript(_RESIZE_OBSERVER_JS.format(html_id=container.html_id)),
        once=True,
    )


__all__ = ["MarkerLayer", "container_size", "live_map_page", "tooltip_lines"]
