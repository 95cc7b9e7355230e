from datetime import datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.config import settings

LOCAL_TZ = ZoneInfo(settings.APP_TIMEZONE)


def get_zone(name: Optional[str]) -> ZoneInfo:
    """Return the ZoneInfo for `name`, falling back to the restaurant zone."""
    if not name:
        return LOCAL_TZ
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return LOCAL_TZ


def make_aware_local(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware in the restaurant zone.

    If dt is naive, attach LOCAL_TZ. If dt already has tzinfo, convert it.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=LOCAL_TZ)
    return dt.astimezone(LOCAL_TZ)


def as_utc(dt: datetime) -> datetime:
    """Convert to an aware UTC datetime. Naive values are stored as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serialize a stored datetime as an ISO-8601 UTC string (None stays None)."""
    if dt is None:
        return None
    return as_utc(dt).isoformat()


def local_day_range_to_utc(date_str: str):
    """Given a local date string (YYYY-MM-DD or ISO datetime), return
    a tuple (start_utc, end_utc) for that local day in the restaurant zone.

    Examples:
      '2026-01-11' -> 2026-01-11 00:00 .. 23:59:59.999999 Europe/Paris, in UTC
      '2026-01-11T10:00:00' -> start and end are that instant
    Raises ValueError for unparsable input.
    """
    if not date_str:
        return None, None

    value = date_str.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    d = datetime.fromisoformat(value)
    if len(value) == 10:
        start_local = datetime.combine(d.date(), time.min)
        end_local = datetime.combine(d.date(), time.max)
    else:
        start_local = d
        end_local = d

    return as_utc(make_aware_local(start_local)), as_utc(make_aware_local(end_local))
