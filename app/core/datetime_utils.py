"""
Date/time helpers for event timestamps.

Postgres returns ``timestamptz`` values as ISO 8601 strings with an offset;
the API presents them as aware datetimes in the configured display zone.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo

from app.config import settings


def display_zone(name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(name or settings.display_timezone)


def date_x_hours_ago(hours: float, now: Optional[datetime] = None) -> datetime:
    """Aware UTC datetime `hours` before now."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc) - timedelta(hours=hours)


def to_instant_string(value: datetime) -> str:
    """Render an aware datetime as a UTC instant, e.g. 2024-05-01T10:00:00Z."""
    if value.tzinfo is None:
        raise ValueError("datetime must be timezone-aware")
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def timestamptz_to_zoned_datetime(value: Union[str, datetime], zone: Optional[str] = None) -> datetime:
    """Parse a timestamptz value and convert it to the display zone.

    Naive inputs are taken to be UTC, which is how Postgres stores them.
    """
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(display_zone(zone))
