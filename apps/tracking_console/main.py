"""NiceGUI entry point for the tracking console."""

from __future__ import annotations

import logging

from nicegui import app, ui
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from apps.tracking_console import config
from apps.tracking_console.core.client import AsyncTrackingClient
from apps.tracking_console.core.health import setup_health_endpoint
from apps.tracking_console.core.session_store import RedisTokenStorage, get_session_store
from libs.common.logging import configure_logging

configure_logging(service_name="tracking_console", log_level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app.config.title = config.PAGE_TITLE
app.config.viewport = "width=device-width, initial-scale=1"

tracking_client = AsyncTrackingClient.get()

# Import pages to trigger @ui.page decorator registration.
from apps.tracking_console import pages  # noqa: E402,F401


@app.exception_handler(Exception)
async def log_unhandled_exception(request: Request, exc: Exception) -> PlainTextResponse:
    logger.error(
        "unhandled_exception",
        extra={"path": str(request.url.path), "type": type(exc).__name__, "error": str(exc)},
    )
    return PlainTextResponse("Server error", status_code=500)


setup_health_endpoint()


async def startup() -> None:
    """Open the HTTP client and restore a persisted session token."""
    await tracking_client.startup()
    await get_session_store().restore()
    logger.info(
        "console_started",
        extra={"backend": config.TRACCAR_API_URL, "token_storage": config.TOKEN_STORAGE_BACKEND},
    )


async def shutdown() -> None:
    await tracking_client.shutdown()
    storage = get_session_store().storage
    if isinstance(storage, RedisTokenStorage):
        try:
            await storage.close()
        except (OSError, ConnectionError) as e:
            logger.warning("Failed to close Redis connection during shutdown: %s", e)


app.on_startup(startup)
app.on_shutdown(shutdown)


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        host=config.HOST,
        port=config.PORT,
        title=config.PAGE_TITLE,
        reload=config.DEBUG,
        show=False,
        storage_secret=config.STORAGE_SECRET,
    )
