"""Operator login page."""

from __future__ import annotations

import logging

import httpx
from nicegui import ui

from apps.tracking_console import config
from apps.tracking_console.core.client import AsyncTrackingClient
from apps.tracking_console.core.session_store import get_session_store
from libs.common.exceptions import LoginError

logger = logging.getLogger(__name__)


def login_error_message(exc: Exception) -> str:
    if isinstance(exc, LoginError):
        if exc.reason == "no token":
            return "No authentication token received"
        return "Invalid email or password"
    if isinstance(exc, httpx.TransportError):
        return "Tracking server unreachable"
    return "Login failed"


@ui.page("/login")
async def login_page() -> None:
    if get_session_store().is_authenticated():
        ui.navigate.to("/")
        return

    with ui.card().classes("absolute-center w-96 p-6 gap-3"):
        ui.label(config.PAGE_TITLE).classes("text-xl font-semibold")
        email = ui.input("Email").classes("w-full")
        password = ui.input("Password", password=True, password_toggle_button=True).classes(
            "w-full"
        )

        async def submit() -> None:
            if not email.value or not password.value:
                ui.notify("Email and password are required", type="warning")
                return
            submit_button.disable()
            try:
                await AsyncTrackingClient.get().login(email.value, password.value)
            except Exception as exc:
                logger.warning("login_page_failed", extra={"error": type(exc).__name__})
                ui.notify(login_error_message(exc), type="negative")
                return
            finally:
                submit_button.enable()
            ui.notify("Logged in", type="positive")
            ui.navigate.to("/")

        submit_button = ui.button("Log in", on_click=submit).classes("w-full")
        password.on("keydown.enter", submit)


__all__ = ["login_error_message", "login_page"]
