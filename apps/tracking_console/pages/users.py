"""User management page: list, search, add, edit, delete."""

from __future__ import annotations

import logging
from typing import Any

from nicegui import ui

from apps.tracking_console.core.dependencies import get_resources
from apps.tracking_console.core.snapshot import PolledSnapshot
from apps.tracking_console.schemas import User
from apps.tracking_console.ui.layout import main_layout, report_error, requires_session
from apps.tracking_console.utils.forms import filter_users, validate_user_form

logger = logging.getLogger(__name__)

_COLUMNS: list[dict[str, Any]] = [
    {"name": "name", "label": "Name", "field": "name", "sortable": True, "align": "left"},
    {"name": "email", "label": "Email", "field": "email", "align": "left"},
    {"name": "phone", "label": "Phone", "field": "phone"},
    {"name": "role", "label": "Role", "field": "role"},
    {"name": "state", "label": "Status", "field": "state"},
]


def user_rows(users: list[User]) -> list[dict[str, Any]]:
    return [
        {
            "id": user.id,
            "name": user.name,
            "email": user.email,
            "phone": user.phone or "-",
            "role": "Administrator" if user.administrator else "User",
            "state": "Disabled" if user.disabled else "Active",
        }
        for user in users
    ]


@ui.page("/users")
@requires_session
@main_layout
async def users_page() -> None:
    resources = get_resources()

    with ui.row().classes("w-full items-center justify-between"):
        ui.label("Users").classes("text-2xl font-semibold")
        with ui.row().classes("gap-2"):
            search = ui.input(placeholder="Search users...").props("dense clearable")
            add_button = ui.button("Add User", icon="person_add")
            refresh_button = ui.button("Refresh", icon="refresh").props("outline")

    table = ui.table(columns=_COLUMNS, rows=[], row_key="id", selection="single").classes(
        "w-full"
    )
    with ui.row().classes("gap-2"):
        edit_button = ui.button("Edit", icon="edit").props("outline")
        delete_button = ui.button("Delete", icon="delete", color="red").props("outline")

    def render(_: list[User] | None = None) -> None:
        table.rows = user_rows(filter_users(snapshot.value or [], search.value or ""))
        table.update()

    # Users change rarely; refreshed on load and after each edit, not polled.
    snapshot: PolledSnapshot[list[User]] = PolledSnapshot(
        resources.list_users,
        name="users",
        on_change=render,
        on_error=lambda exc: report_error(exc, "fetch users"),
    )
    search.on_value_change(lambda _: render())

    async def reload() -> None:
        try:
            await snapshot.refresh()
        except Exception:
            # on_error has already notified the operator
            logger.debug("users_reload_failed", exc_info=True)

    def selected_user() -> User | None:
        if not table.selected:
            ui.notify("Select a user first", type="warning")
            return None
        selected_id = table.selected[0]["id"]
        return next((u for u in snapshot.value or [] if u.id == selected_id), None)

    def open_editor(user: User | None) -> None:
        with ui.dialog() as dialog, ui.card().classes("w-96"):
            ui.label("Edit User" if user else "Add User").classes("text-lg font-semibold")
            name = ui.input("Name", value=user.name if user else "").classes("w-full")
            email = ui.input("Email", value=user.email if user else "").classes("w-full")
            phone = ui.input("Phone", value=(user.phone or "") if user else "").classes("w-full")
            password = ui.input(
                "Password" if user is None else "New password (optional)", password=True
            ).classes("w-full")
            administrator = ui.switch("Administrator", value=user.administrator if user else False)
            disabled = ui.switch("Disabled", value=user.disabled if user else False)

            async def save() -> None:
                try:
                    data = validate_user_form(
                        name.value,
                        email.value,
                        phone=phone.value,
                        password=password.value,
                        administrator=bool(administrator.value),
                        disabled=bool(disabled.value),
                    )
                except ValueError as exc:
                    ui.notify(str(exc), type="warning")
                    return
                try:
                    if user is None:
                        await resources.create_user(data)
                    else:
                        await resources.update_user(user.id, data)
                except Exception as exc:
                    logger.exception("user_save_failed")
                    report_error(exc, "save user")
                    return
                ui.notify(
                    "User updated successfully" if user else "User added successfully",
                    type="positive",
                )
                dialog.close()
                await reload()

            with ui.row().classes("w-full justify-end"):
                ui.button("Cancel", on_click=dialog.close).props("flat")
                ui.button("Save", on_click=save)
        dialog.open()

    def confirm_delete() -> None:
        user = selected_user()
        if user is None:
            return
        with ui.dialog() as dialog, ui.card():
            ui.label(f'Delete user "{user.name}"? This cannot be undone.')

            async def do_delete() -> None:
                try:
                    await resources.delete_user(user.id)
                except Exception as exc:
                    logger.exception("user_delete_failed", extra={"user_id": user.id})
                    report_error(exc, "delete user")
                    return
                ui.notify("User deleted successfully", type="positive")
                dialog.close()
                await reload()

            with ui.row().classes("w-full justify-end"):
                ui.button("Cancel", on_click=dialog.close).props("flat")
                ui.button("Delete", on_click=do_delete, color="red")
        dialog.open()

    def edit_selected() -> None:
        user = selected_user()
        if user is not None:
            open_editor(user)

    add_button.on_click(lambda: open_editor(None))
    edit_button.on_click(edit_selected)
    delete_button.on_click(confirm_delete)
    refresh_button.on_click(reload)
    await reload()


__all__ = ["user_rows", "users_page"]
