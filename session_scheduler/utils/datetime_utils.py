"""
Datetime helpers for the ISO strings exchanged with the browser,
Google Calendar and Zoom.
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def coerce_zoneinfo(name: Optional[str]) -> tzinfo:
    if not name:
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def parse_iso(value: str) -> datetime:
    """Parse ``YYYY-MM-DD[THH:MM[:SS]][Z|±HH:MM]``. Raises ValueError."""
    return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))


def to_aware(value: str, tz_name: Optional[str] = None) -> datetime:
    """Parse and attach ``tz_name`` (UTC when unknown) to naive values."""
    dt = parse_iso(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=coerce_zoneinfo(tz_name))
    return dt


def is_date_only(value: str) -> bool:
    try:
        date.fromisoformat(value.strip())
    except ValueError:
        return False
    return True


def with_seconds(value: str) -> str:
    """Google Calendar and Zoom both want seconds; form inputs stop at minutes.

    Naive values stay naive, offsets are kept as given.
    """
    return parse_iso(value).isoformat(timespec="seconds")


def duration_minutes(start: str, end: str, tz_name: Optional[str] = None) -> int:
    delta = to_aware(end, tz_name) - to_aware(start, tz_name)
    return round(delta.total_seconds() / 60)


def event_time(boundary: Optional[dict]) -> str:
    """``start``/``end`` of a Calendar event resource as a plain string."""
    if not boundary:
        return ""
    return boundary.get("dateTime") or boundary.get("date") or ""


def event_start(event: dict) -> Optional[datetime]:
    start = event.get("start") or {}
    raw = event_time(start)
    if not raw:
        return None
    try:
        return to_aware(raw, start.get("timeZone"))
    except ValueError:
        return None


def rfc3339(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
