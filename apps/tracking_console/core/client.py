"""Async HTTP gateway to the tracking server's REST API.

Every backend call goes through ``AsyncTrackingClient.request``. It makes exactly
one attempt per call: no retry, no backoff. Recovery (retry, toast, redirect to
login) belongs to the caller.
"""

from __future__ import annotations

import logging
import re
import time
from typing import Any

import httpx

from apps.tracking_console import config
from apps.tracking_console.core.session_store import SessionStore, get_session_store
from libs.common.exceptions import ApiError, LoginError, Unauthorized

logger = logging.getLogger(__name__)

# The backend hands out its session id only as a cookie; the console then sends
# it back as a bearer token.
SESSION_COOKIE_PATTERN = re.compile(r"JSESSIONID=([^;]+)")


def extract_session_token(set_cookie_headers: list[str]) -> str:
    """Return the session token from ``Set-Cookie`` header values, or ''."""
    for header in set_cookie_headers:
        match = SESSION_COOKIE_PATTERN.search(header)
        if match:
            return match.group(1).strip()
    return ""


class AsyncTrackingClient:
    """Async HTTP client for tracking server calls."""

    _instance: AsyncTrackingClient | None = None

    def __init__(
        self,
        session_store: SessionStore | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._session_store = session_store
        self._http_client = http_client

    @classmethod
    def get(cls) -> AsyncTrackingClient:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def session_store(self) -> SessionStore:
        if self._session_store is None:
            self._session_store = get_session_store()
        return self._session_store

    @property
    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            raise RuntimeError("Client not initialized - call startup() first")
        return self._http_client

    async def startup(self) -> None:
        """Initialize client on app startup."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=config.TRACCAR_API_URL,
                timeout=httpx.Timeout(config.HTTP_TIMEOUT_SECONDS, connect=5.0),
                headers={"Accept": "application/json"},
            )

    async def shutdown(self) -> None:
        """Close client on app shutdown."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def _auth_headers(self) -> dict[str, str]:
        token = self.session_store.get_token()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any | None:
        """Send one request and classify the outcome.

        Args:
            path: Path below the API base URL, e.g. ``/devices/7``.
            method: HTTP method.
            body: JSON-serializable request body, if any.
            params: Query string parameters, if any.

        Returns:
            Parsed JSON body, or None for 204 and empty 2xx responses.

        Raises:
            Unauthorized: On 401, after the session store has been cleared.
            ApiError: On any other non-2xx status, carrying the raw body text.
            httpx.TransportError: On network failure (propagated unchanged).
        """
        method_upper = method.upper()
        headers = self._auth_headers()
        kwargs: dict[str, Any] = {"headers": headers}
        if body is not None:
            kwargs["json"] = body
        if params:
            kwargs["params"] = params

        started = time.perf_counter()
        resp = await self._client.request(method_upper, path, **kwargs)
        logger.debug(
            "api_request",
            extra={
                "method": method_upper,
                "path": path,
                "status": resp.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 1),
            },
        )

        if resp.status_code == 401:
            logger.warning("api_unauthorized", extra={"method": method_upper, "path": path})
            await self.session_store.clear()
            raise Unauthorized(resp.text)

        if resp.status_code == 204:
            return None

        if not resp.is_success:
            raise ApiError(resp.status_code, resp.text)

        if not resp.content:
            return None
        return resp.json()

    async def login(self, identity: str, secret: str) -> dict[str, Any]:
        """Open a session with the backend.

        Sends an unauthenticated form-encoded ``POST /session``. The token comes
        from the ``JSESSIONID`` cookie; a 2xx answer without one is a failed login.

        Returns:
            The operator profile returned by the backend.

        Raises:
            LoginError: Non-2xx answer, or no extractable token.
        """
        resp = await self._client.post(
            "/session",
            data={"email": identity, "password": secret},
        )
        # The token travels in the Authorization header from here on, never as a cookie.
        self._client.cookies.clear()

        if not resp.is_success:
            logger.warning("login_failed", extra={"identity": identity, "status": resp.status_code})
            raise LoginError("login failed", status=resp.status_code)

        token = extract_session_token(resp.headers.get_list("set-cookie"))
        if not token:
            logger.warning("login_missing_token", extra={"identity": identity})
            raise LoginError("no token", status=resp.status_code)

        profile = resp.json() if resp.content else {}
        await self.session_store.set_session(identity, token)
        return profile if isinstance(profile, dict) else {}

    async def logout(self) -> None:
        """End the session server-side, then always clear the local session."""
        try:
            await self.request("/session", method="DELETE")
        finally:
            await self.session_store.clear()


__all__ = ["AsyncTrackingClient", "SESSION_COOKIE_PATTERN", "extract_session_token"]
