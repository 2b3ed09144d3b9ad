"""Datetime helpers shared by services and models."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite round-trips drop tzinfo) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_display_time(value: datetime, tz_name: str) -> str:
    """Render a timestamp for humans, e.g. ``Mon 3 Mar 2025, 14:30 GMT``."""
    try:
        tz = ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        tz = ZoneInfo("UTC")
    local = ensure_utc(value).astimezone(tz)
    return f"{local:%a} {local.day} {local:%b %Y, %H:%M %Z}"
