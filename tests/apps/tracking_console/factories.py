"""Model builders shared by tracking_console tests."""

from __future__ import annotations

from datetime import UTC, datetime

from apps.tracking_console.schemas import Device, Position


def make_device(device_id: int, name: str | None = None, status: str = "online") -> Device:
    return Device(
        id=device_id,
        name=name or f"Device {device_id}",
        uniqueId=f"35000000000{device_id:04d}",
        status=status,
    )


def make_position(
    position_id: int,
    device_id: int,
    latitude: float = 0.0,
    longitude: float = 0.0,
    speed: float = 0.0,
) -> Position:
    return Position(
        id=position_id,
        deviceId=device_id,
        latitude=latitude,
        longitude=longitude,
        speed=speed,
        deviceTime=datetime(2026, 10, 18, 12, 0, tzinfo=UTC),
    )
