"""Typed resource operations over the request gateway.

Each method is a fixed path/method plus shape marshaling into the pydantic
models in ``apps.tracking_console.schemas``. No semantic validation happens
here; required form fields are checked by the calling page. Gateway errors
(``Unauthorized``, ``ApiError``, transport errors) propagate unchanged.
"""

from __future__ import annotations

import logging
import random
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import BaseModel

from apps.tracking_console.core.client import AsyncTrackingClient
from apps.tracking_console.schemas import (
    Device,
    DeviceInput,
    Position,
    ServerStats,
    User,
    UserInput,
)
from libs.common.exceptions import ApiError, Unauthorized

logger = logging.getLogger(__name__)


def _iso_utc(value: datetime) -> str:
    """ISO-8601 in UTC with a ``Z`` suffix. Naive datetimes are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _payload(data: BaseModel) -> dict[str, Any]:
    return data.model_dump(mode="json", exclude_unset=True)


def _expect_list(payload: Any, path: str) -> list[Any]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"Expected JSON array response from {path}")
    return payload


class TrackingResources:
    """Devices, positions, users and server stats."""

    def __init__(self, gateway: AsyncTrackingClient) -> None:
        self.gateway = gateway

    # ===== Devices =====

    async def list_devices(self) -> list[Device]:
        payload = await self.gateway.request("/devices")
        return [Device.model_validate(item) for item in _expect_list(payload, "/devices")]

    async def get_device(self, device_id: int) -> Device:
        payload = await self.gateway.request(f"/devices/{device_id}")
        return Device.model_validate(payload)

    async def create_device(self, data: DeviceInput) -> Device:
        payload = await self.gateway.request("/devices", method="POST", body=_payload(data))
        return Device.model_validate(payload)

    async def update_device(self, device_id: int, data: DeviceInput) -> Device:
        body = {"id": device_id, **_payload(data)}
        payload = await self.gateway.request(f"/devices/{device_id}", method="PUT", body=body)
        return Device.model_validate(payload)

    async def delete_device(self, device_id: int) -> None:
        await self.gateway.request(f"/devices/{device_id}", method="DELETE")

    # ===== Positions =====

    async def latest_positions(self) -> list[Position]:
        """Latest known position of every device visible to the operator."""
        payload = await self.gateway.request("/positions")
        return [Position.model_validate(item) for item in _expect_list(payload, "/positions")]

    async def position_history(
        self, device_id: int, start: datetime, end: datetime
    ) -> list[Position]:
        """Positions reported by one device between ``start`` and ``end``."""
        params = {"deviceId": device_id, "from": _iso_utc(start), "to": _iso_utc(end)}
        payload = await self.gateway.request("/positions", params=params)
        return [Position.model_validate(item) for item in _expect_list(payload, "/positions")]

    # ===== Users =====

    async def list_users(self) -> list[User]:
        payload = await self.gateway.request("/users")
        return [User.model_validate(item) for item in _expect_list(payload, "/users")]

    async def get_user(self, user_id: int) -> User:
        payload = await self.gateway.request(f"/users/{user_id}")
        return User.model_validate(payload)

    async def create_user(self, data: UserInput) -> User:
        payload = await self.gateway.request("/users", method="POST", body=_payload(data))
        return User.model_validate(payload)

    async def update_user(self, user_id: int, data: UserInput) -> User:
        body = {"id": user_id, **_payload(data)}
        payload = await self.gateway.request(f"/users/{user_id}", method="PUT", body=body)
        return User.model_validate(payload)

    async def delete_user(self, user_id: int) -> None:
        await self.gateway.request(f"/users/{user_id}", method="DELETE")

    # ===== Server =====

    async def server_stats(self) -> ServerStats:
        payload = await self.gateway.request("/server/stats")
        return ServerStats.model_validate(payload or {})


def synthetic_server_stats(rng: random.Random | None = None) -> ServerStats:
    """Placeholder figures shown when the backend has no stats endpoint."""
    rng = rng or random.Random()
    return ServerStats(
        cpuLoad=rng.uniform(0.0, 100.0),
        usedMemory=rng.uniform(0.0, 1024.0),
        totalMemory=4096.0,
        activeUsers=rng.randrange(10),
        activeDevices=rng.randrange(50),
        synthetic=True,
    )


async def server_stats_or_synthetic(
    resources: TrackingResources, rng: random.Random | None = None
) -> ServerStats:
    """Fetch server stats, degrading to synthetic figures if the endpoint fails.

    ``Unauthorized`` is re-raised: a dead session must still reach the login page.
    """
    try:
        return await resources.server_stats()
    except Unauthorized:
        raise
    except (ApiError, httpx.TransportError, ValueError) as exc:
        logger.info(
            "server_stats_fallback",
            extra={"error": type(exc).__name__, "status": getattr(exc, "status", None)},
        )
        return synthetic_server_stats(rng)


__all__ = [
    "TrackingResources",
    "server_stats_or_synthetic",
    "synthetic_server_stats",
]
