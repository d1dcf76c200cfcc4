from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pos_backend.core.exceptions import ValidationError


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """ZoneInfo for an IANA name; None means the system local zone"""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone '{name}'", {"timezone": name}) from e


def local_today(tz: Optional[tzinfo] = None) -> date:
    return datetime.now(tz).date() if tz else datetime.now().date()


def _local_midnight_as_utc(day: date, tz: Optional[tzinfo]) -> datetime:
    midnight = datetime.combine(day, time.min)
    if tz is not None:
        midnight = midnight.replace(tzinfo=tz)
    # naive midnight is read as system local time by astimezone()
    return midnight.astimezone(timezone.utc).replace(tzinfo=None)


def local_day_bounds(day: date, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """Naive UTC [start, end) range covering the local calendar day"""
    return _local_midnight_as_utc(day, tz), _local_midnight_as_utc(day + timedelta(days=1), tz)


def utc_to_local(stored: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Interpret a stored naive timestamp as UTC and convert it"""
    aware = stored.replace(tzinfo=timezone.utc) if stored.tzinfo is None else stored
    return aware.astimezone(tz) if tz is not None else aware.astimezone()
