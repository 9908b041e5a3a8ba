"""Formatting helpers shared by record descriptions and report templates.

These are registered as Jinja filters in the HTML report and called directly
when building plain-text descriptions, so on-screen lines, printed pages and
PDF rows all read the same.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def group_thousands(value: Any) -> str:
    """``1234567`` -> ``"1 234 567"``. Non-numeric input yields an empty string."""

    try:
        number = int(value)
    except (TypeError, ValueError):
        return ""
    sign = "-" if number < 0 else ""
    return sign + f"{abs(number):,}".replace(",", " ")


def format_isk(value: Any) -> str:
    """Render an amount in Icelandic krónur, e.g. ``50 000 kr.``"""

    grouped = group_thousands(value)
    return f"{grouped} kr." if grouped else ""


def _zone(tz_name: str | None) -> ZoneInfo | None:
    if not tz_name:
        return None
    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        return None


def to_local_datetime(value: Any, tz_name: str | None = None) -> datetime | None:
    """Convert strings or naive datetimes into aware datetimes in ``tz_name``."""

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value)
        except ValueError:
            return None
    else:
        return None

    zone = _zone(tz_name)
    if dt.tzinfo is None and zone:
        dt = dt.replace(tzinfo=zone)
    if zone:
        dt = dt.astimezone(zone)
    return dt


def format_timestamp(value: Any, tz_name: str | None = None, fmt: str = "%Y-%m-%d %H:%M") -> str:
    dt = to_local_datetime(value, tz_name)
    return dt.strftime(fmt) if dt else ""


__all__ = ["format_isk", "format_timestamp", "group_thousands", "to_local_datetime"]
