"""Pydantic models for the tracking server's REST payloads.

Field names follow the backend's camelCase JSON so models round-trip without
aliases. Unknown keys from the backend are ignored. Only types are checked:
an out-of-range coordinate or speed is kept as sent.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DeviceStatus = Literal["online", "offline", "unknown"]


class _BackendModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Device(_BackendModel):
    """A tracked unit. ``id`` is the stable key; ``uniqueId`` is e.g. the IMEI."""

    id: int
    name: str
    uniqueId: str
    status: DeviceStatus = "unknown"
    lastUpdate: datetime | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str:
        if isinstance(value, str) and value.lower() in {"online", "offline"}:
            return value.lower()
        return "unknown"


class DeviceInput(_BackendModel):
    """Create/update payload for a device. Unset fields are not sent."""

    name: str | None = None
    uniqueId: str | None = None


class Position(_BackendModel):
    id: int
    deviceId: int
    latitude: float
    longitude: float
    speed: float = 0.0
    deviceTime: datetime
    attributes: dict[str, Any] = Field(default_factory=dict)
    protocol: str | None = None
    serverTime: datetime | None = None
    fixTime: datetime | None = None
    valid: bool | None = None
    altitude: float | None = None
    course: float | None = None
    address: str | None = None


class User(_BackendModel):
    id: int
    name: str
    email: str
    phone: str | None = None
    administrator: bool = False
    disabled: bool = False


class UserInput(_BackendModel):
    """Create/update payload for a user. Unset fields are not sent."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    password: str | None = None
    administrator: bool | None = None
    disabled: bool | None = None


class ServerStats(_BackendModel):
    """Aggregate server health.

    ``synthetic`` is never sent by the backend; it marks figures produced by
    the fallback when the stats endpoint is unavailable.
    """

    cpuLoad: float = 0.0
    usedMemory: float = 0.0
    totalMemory: float = 0.0
    activeUsers: int = 0
    activeDevices: int = 0
    synthetic: bool = False


__all__ = [
    "Device",
    "DeviceInput",
    "DeviceStatus",
    "Position",
    "ServerStats",
    "User",
    "UserInput",
]
