"""Display formatting for server stats and map tooltips."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

LoadSeverity = Literal["normal", "elevated", "critical"]

_SEVERITY_CLASSES: dict[LoadSeverity, str] = {
    "normal": "text-primary",
    "elevated": "text-amber-500",
    "critical": "text-red-600",
}


def format_memory(value: float) -> str:
    """Render a byte count as B, KB, MB or GB with one decimal.

    Examples:
        >>> format_memory(512)
        '512 B'
        >>> format_memory(1536)
        '1.5 KB'
    """
    if value < 1024:
        return f"{value:g} B"
    kb = value / 1024
    if kb < 1024:
        return f"{kb:.1f} KB"
    mb = kb / 1024
    if mb < 1024:
        return f"{mb:.1f} MB"
    return f"{mb / 1024:.1f} GB"


def usage_percent(used: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return min(100.0, max(0.0, used / total * 100.0))


def load_severity(percent: float) -> LoadSeverity:
    """Above 80% is critical, above 50% elevated."""
    if percent > 80:
        return "critical"
    if percent > 50:
        return "elevated"
    return "normal"


def severity_class(percent: float) -> str:
    return _SEVERITY_CLASSES[load_severity(percent)]


def format_speed(speed: float) -> str:
    return f"{speed:.1f} km/h"


def format_timestamp(value: datetime | None) -> str:
    if value is None:
        return "-"
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
