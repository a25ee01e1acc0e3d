"""Form validation and list filtering for the device and user pages.

Validation lives here rather than in the resource layer: the fetchers only
marshal shapes.
"""

from __future__ import annotations

from collections.abc import Iterable

from apps.tracking_console.schemas import Device, DeviceInput, User, UserInput


def validate_device_form(name: str | None, unique_id: str | None) -> DeviceInput:
    """Return the payload for a device form, or raise ValueError.

    Both the name and the unique identifier (e.g. IMEI) are required.
    """
    name = (name or "").strip()
    unique_id = (unique_id or "").strip()
    if not name or not unique_id:
        raise ValueError("Name and ID are required")
    return DeviceInput(name=name, uniqueId=unique_id)


def validate_user_form(
    name: str | None,
    email: str | None,
    *,
    phone: str | None = None,
    password: str | None = None,
    administrator: bool = False,
    disabled: bool = False,
) -> UserInput:
    name = (name or "").strip()
    email = (email or "").strip()
    if not name or not email:
        raise ValueError("Name and email are required")
    fields: dict[str, object] = {
        "name": name,
        "email": email,
        "phone": (phone or "").strip() or None,
        "administrator": administrator,
        "disabled": disabled,
    }
    # An empty password on edit means "keep the current one".
    if password:
        fields["password"] = password
    return UserInput.model_validate(fields)


def filter_devices(devices: Iterable[Device], query: str) -> list[Device]:
    """Case-insensitive match on name or unique id; empty query keeps all."""
    needle = query.strip().lower()
    if not needle:
        return list(devices)
    return [
        device
        for device in devices
        if needle in device.name.lower() or needle in device.uniqueId.lower()
    ]


def filter_users(users: Iterable[User], query: str) -> list[User]:
    needle = query.strip().lower()
    if not needle:
        return list(users)
    return [user for user in users if needle in user.name.lower() or needle in user.email.lower()]
