"""Device management page: list, search, add, edit, delete."""

from __future__ import annotations

import logging
from typing import Any

from nicegui import ui

from apps.tracking_console import config
from apps.tracking_console.core.dependencies import get_resources
from apps.tracking_console.core.snapshot import PolledSnapshot
from apps.tracking_console.schemas import Device
from apps.tracking_console.ui.layout import (
    main_layout,
    page_poller,
    report_error,
    requires_session,
)
from apps.tracking_console.utils.formatters import format_timestamp
from apps.tracking_console.utils.forms import filter_devices, validate_device_form

logger = logging.getLogger(__name__)

_COLUMNS: list[dict[str, Any]] = [
    {"name": "name", "label": "Name", "field": "name", "sortable": True, "align": "left"},
    {"name": "uniqueId", "label": "Identifier", "field": "uniqueId", "align": "left"},
    {"name": "status", "label": "Status", "field": "status", "sortable": True},
    {"name": "lastUpdate", "label": "Last Update", "field": "lastUpdate"},
]


def device_rows(devices: list[Device]) -> list[dict[str, Any]]:
    return [
        {
            "id": device.id,
            "name": device.name,
            "uniqueId": device.uniqueId,
            "status": device.status,
            "lastUpdate": format_timestamp(device.lastUpdate),
        }
        for device in devices
    ]


@ui.page("/devices")
@requires_session
@main_layout
async def devices_page() -> None:
    resources = get_resources()
    poller = page_poller()

    with ui.row().classes("w-full items-center justify-between"):
        ui.label("Devices").classes("text-2xl font-semibold")
        with ui.row().classes("gap-2"):
            search = ui.input(placeholder="Search devices...").props("dense clearable")
            add_button = ui.button("Add Device", icon="add")
            refresh_button = ui.button("Refresh", icon="refresh").props("outline")

    table = ui.table(columns=_COLUMNS, rows=[], row_key="id", selection="single").classes(
        "w-full"
    )
    with ui.row().classes("gap-2"):
        edit_button = ui.button("Edit", icon="edit").props("outline")
        delete_button = ui.button("Delete", icon="delete", color="red").props("outline")

    def render(_: list[Device] | None = None) -> None:
        table.rows = device_rows(filter_devices(snapshot.value or [], search.value or ""))
        table.update()

    snapshot: PolledSnapshot[list[Device]] = PolledSnapshot(
        resources.list_devices,
        name="devices",
        on_change=render,
        on_error=lambda exc: report_error(exc, "fetch devices"),
    )
    search.on_value_change(lambda _: render())

    async def reload() -> None:
        try:
            await snapshot.refresh()
        except Exception:
            # on_error has already notified the operator
            logger.debug("devices_reload_failed", exc_info=True)

    def selected_device() -> Device | None:
        if not table.selected:
            ui.notify("Select a device first", type="warning")
            return None
        selected_id = table.selected[0]["id"]
        return next((d for d in snapshot.value or [] if d.id == selected_id), None)

    def open_editor(device: Device | None) -> None:
        with ui.dialog() as dialog, ui.card().classes("w-96"):
            ui.label("Edit Device" if device else "Add Device").classes("text-lg font-semibold")
            name = ui.input("Name", value=device.name if device else "").classes("w-full")
            unique_id = ui.input(
                "Identifier (IMEI)", value=device.uniqueId if device else ""
            ).classes("w-full")

            async def save() -> None:
                try:
                    data = validate_device_form(name.value, unique_id.value)
                except ValueError as exc:
                    ui.notify(str(exc), type="warning")
                    return
                try:
                    if device is None:
                        await resources.create_device(data)
                    else:
                        await resources.update_device(device.id, data)
                except Exception as exc:
                    logger.exception("device_save_failed")
                    report_error(exc, "save device")
                    return
                ui.notify(
                    "Device updated successfully" if device else "Device added successfully",
                    type="positive",
                )
                dialog.close()
                await reload()

            with ui.row().classes("w-full justify-end"):
                ui.button("Cancel", on_click=dialog.close).props("flat")
                ui.button("Save", on_click=save)
        dialog.open()

    def confirm_delete() -> None:
        device = selected_device()
        if device is None:
            return
        with ui.dialog() as dialog, ui.card():
            ui.label(f'Delete device "{device.name}"? This cannot be undone.')

            async def do_delete() -> None:
                try:
                    await resources.delete_device(device.id)
                except Exception as exc:
                    logger.exception("device_delete_failed", extra={"device_id": device.id})
                    report_error(exc, "delete device")
                    return
                ui.notify("Device deleted successfully", type="positive")
                dialog.close()
                await reload()

            with ui.row().classes("w-full justify-end"):
                ui.button("Cancel", on_click=dialog.close).props("flat")
                ui.button("Delete", on_click=do_delete, color="red")
        dialog.open()

    def edit_selected() -> None:
        device = selected_device()
        if device is not None:
            open_editor(device)

    add_button.on_click(lambda: open_editor(None))
    edit_button.on_click(edit_selected)
    delete_button.on_click(confirm_delete)
    refresh_button.on_click(reload)
    snapshot.attach(poller, config.DEVICE_REFRESH_SECONDS)


__all__ = ["device_rows", "devices_page"]
