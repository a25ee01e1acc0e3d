"""Shared page layout, session guard and error reporting for console pages."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any

import httpx
from nicegui import ui

from apps.tracking_console import config
from apps.tracking_console.core.client import AsyncTrackingClient
from apps.tracking_console.core.poller import Poller
from apps.tracking_console.core.session_store import get_session_store
from libs.common.exceptions import ApiError, Unauthorized

logger = logging.getLogger(__name__)

AsyncPage = Callable[..., Awaitable[Any]]

NAV_ITEMS = [
    ("Dashboard", "/", "dashboard"),
    ("Live Map", "/map", "map"),
    ("Devices", "/devices", "smartphone"),
    ("Users", "/users", "group"),
]


def report_error(exc: Exception, action: str) -> None:
    """Toast an error; an expired session sends the operator back to login."""
    if isinstance(exc, Unauthorized):
        ui.notify("Session expired. Please log in again.", type="warning")
        ui.navigate.to("/login")
        return
    if isinstance(exc, ApiError):
        ui.notify(f"Failed to {action}: {exc.body or exc.status}", type="negative")
        return
    if isinstance(exc, httpx.TransportError):
        ui.notify(f"Failed to {action}: server unreachable", type="negative")
        return
    ui.notify(f"Failed to {action}", type="negative")


def page_poller() -> Poller:
    """Poller bound to the current browser client; shut down on disconnect."""
    poller = Poller()
    ui.context.client.on_disconnect(poller.shutdown)
    return poller


def requires_session(page_func: AsyncPage) -> AsyncPage:
    """Redirect to /login unless a session token is held."""

    @wraps(page_func)
    async def wrapper(*args: Any, **kwargs: Any) -> None:
        if not get_session_store().is_authenticated():
            ui.navigate.to("/login")
            return
        await page_func(*args, **kwargs)

    return wrapper


def main_layout(page_func: AsyncPage) -> AsyncPage:
    """Decorator for consistent page layout with header and navigation."""

    @wraps(page_func)
    async def wrapper(*args: Any, **kwargs: Any) -> None:
        session_store = get_session_store()

        async def do_logout() -> None:
            try:
                await AsyncTrackingClient.get().logout()
                ui.notify("Logged out", type="positive")
            except Exception as exc:
                # The local session is gone either way.
                logger.warning("logout_backend_failed", extra={"error": type(exc).__name__})
            ui.navigate.to("/login")

        with ui.header().classes("items-center justify-between bg-slate-800 px-4"):
            with ui.row().classes("items-center gap-4"):
                ui.label(config.PAGE_TITLE).classes("text-lg font-semibold")
                for label, path, icon in NAV_ITEMS:
                    with ui.link(target=path).classes("text-white no-underline"):
                        with ui.row().classes("items-center gap-1"):
                            ui.icon(icon)
                            ui.label(label).classes("text-sm")
            with ui.row().classes("items-center gap-3"):
                ui.label(session_store.identity or "operator").classes("text-sm text-gray-300")
                ui.button("Logout", on_click=do_logout, icon="logout").props("flat color=white")

        with ui.column().classes("w-full max-w-6xl mx-auto p-4 gap-4"):
            await page_func(*args, **kwargs)

    return wrapper


__all__ = ["NAV_ITEMS", "main_layout", "page_poller", "report_error", "requires_session"]
