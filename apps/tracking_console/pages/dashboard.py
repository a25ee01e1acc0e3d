"""Dashboard page: aggregate server health, refreshed every 30 seconds."""

from __future__ import annotations

import logging

from nicegui import ui

from apps.tracking_console import config
from apps.tracking_console.core.dependencies import get_resources
from apps.tracking_console.core.resources import server_stats_or_synthetic
from apps.tracking_console.core.snapshot import PolledSnapshot
from apps.tracking_console.schemas import ServerStats
from apps.tracking_console.ui.layout import (
    main_layout,
    page_poller,
    report_error,
    requires_session,
)
from apps.tracking_console.utils.formatters import (
    format_memory,
    severity_class,
    usage_percent,
)

logger = logging.getLogger(__name__)


def stat_cards(stats: ServerStats) -> list[tuple[str, str, str]]:
    """(title, value, css class) for each card."""
    memory_pct = usage_percent(stats.usedMemory, stats.totalMemory)
    return [
        ("CPU Load", f"{stats.cpuLoad:.1f}%", severity_class(stats.cpuLoad)),
        (
            "Memory Usage",
            f"{format_memory(stats.usedMemory)} / {format_memory(stats.totalMemory)}",
            severity_class(memory_pct),
        ),
        ("Active Devices", str(stats.activeDevices), "text-primary"),
        ("Active Users", str(stats.activeUsers), "text-primary"),
    ]


@ui.page("/")
@requires_session
@main_layout
async def dashboard_page() -> None:
    resources = get_resources()
    poller = page_poller()

    with ui.row().classes("w-full items-center justify-between"):
        ui.label("Server Status").classes("text-2xl font-semibold")
        refresh_button = ui.button("Refresh", icon="refresh").props("outline")
    ui.label(f"Backend: {config.TRACCAR_API_URL}").classes("text-xs text-gray-500")

    @ui.refreshable
    def cards() -> None:
        stats = snapshot.value
        if stats is None:
            ui.label("Loading server status...").classes("text-gray-500")
            return
        if stats.synthetic:
            ui.label("Stats endpoint unavailable; showing placeholder figures.").classes(
                "text-xs text-amber-600"
            )
        with ui.row().classes("w-full gap-4"):
            for title, value, css in stat_cards(stats):
                with ui.card().classes("w-56"):
                    ui.label(title).classes("text-sm text-gray-500")
                    ui.label(value).classes(f"text-2xl font-bold {css}")

    snapshot: PolledSnapshot[ServerStats] = PolledSnapshot(
        lambda: server_stats_or_synthetic(resources),
        name="server_stats",
        on_change=lambda _: cards.refresh(),
        on_error=lambda exc: report_error(exc, "load server status"),
    )
    cards()

    async def manual_refresh() -> None:
        try:
            await snapshot.refresh()
        except Exception:
            # on_error has already notified the operator
            logger.debug("stats_manual_refresh_failed", exc_info=True)

    refresh_button.on_click(manual_refresh)
    snapshot.attach(poller, config.SERVER_STATS_REFRESH_SECONDS)


__all__ = ["dashboard_page", "stat_cards"]
