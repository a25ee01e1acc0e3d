"""Health endpoint registration for NiceGUI app."""

from __future__ import annotations

from nicegui import app

from apps.tracking_console.core.session_store import get_session_store


def setup_health_endpoint() -> None:
    """Register the /health endpoint on the FastAPI app."""

    @app.get("/health")
    def _health() -> dict[str, str | bool]:
        return {"status": "ok", "authenticated": get_session_store().is_authenticated()}
