"""
Timezone utilities for RoomBook.

Every schedule, slot and date window is interpreted in a single fixed
operating time zone. Reservations are stored as UTC instants.
"""

from datetime import date, datetime, time, timezone
from typing import Optional

import pytz

from .config import settings


def get_operating_timezone(tz_str: Optional[str] = None) -> pytz.BaseTzInfo:
    """
    Get the operating timezone.

    Args:
        tz_str: Optional explicit zone name, defaults to the configured one

    Returns:
        pytz timezone object
    """
    return pytz.timezone(tz_str or settings.operating_timezone)


def operating_now(tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """Get current datetime in the operating timezone."""
    return datetime.now(tz or get_operating_timezone())


def operating_today(tz: Optional[pytz.BaseTzInfo] = None) -> date:
    """Get 'today' in the operating timezone."""
    return operating_now(tz).date()


def ensure_utc(dt: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are assumed to already be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_operating(dt: datetime, tz: Optional[pytz.BaseTzInfo] = None) -> datetime:
    """
    Convert a datetime to the operating timezone.

    Naive datetimes are treated as UTC, matching how the store hands them back.
    """
    return ensure_utc(dt).astimezone(tz or get_operating_timezone())


def localize_hour(
    target_date: date, hour: int, tz: Optional[pytz.BaseTzInfo] = None
) -> Optional[datetime]:
    """
    Build the aware civil datetime for ``hour:00`` on ``target_date``.

    Uses the timezone rules valid on the target date (not today).

    Returns:
        The localized datetime, or None when the hour does not exist on that
        date (DST spring-forward gap). Ambiguous fall-back hours resolve to the
        first occurrence.
    """
    zone = tz or get_operating_timezone()
    naive_dt = datetime.combine(target_date, time(hour, 0))
    try:
        return zone.localize(naive_dt, is_dst=None)
    except pytz.exceptions.AmbiguousTimeError:
        return zone.localize(naive_dt, is_dst=True)
    except pytz.exceptions.NonExistentTimeError:
        return None
