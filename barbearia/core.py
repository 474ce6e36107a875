# barbearia/core.py
"""
Civil-time helpers shared by every caller of the slot engine.

Working hours are wall-clock times at the shop. Appointments and blocks are
stored as absolute UTC instants. Everything that moves a value
between those two worlds goes through this module.
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo

from .config import get_settings


def shop_timezone() -> ZoneInfo:
    return ZoneInfo(get_settings().TIMEZONE)


def truncate_to_minute(dt: datetime) -> datetime:
    return dt.replace(second=0, microsecond=0)


def as_utc(dt: datetime) -> datetime:
    """Aware UTC instant. Naive values are read back from SQLite, which drops the zone, and are UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_storage(dt: datetime, tz: tzinfo | None = None) -> datetime:
    """
    Aware UTC value for persistence.

    A naive input is a wall-clock time at the shop (that's what a client
    picking "09:45" means), so it is localised before conversion.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz or shop_timezone())
    return dt.astimezone(timezone.utc)


def local_on_date(instant: datetime, target_date: date, tz: tzinfo) -> datetime:
    """
    Re-express a stored instant as "its local wall-clock time on target_date".

    The hour and minute are read in the shop's zone and recombined with the
    target date. Reinterpreting the raw instant, or anchoring on UTC
    midnight, shifts every slot by the UTC offset.
    """
    local = as_utc(instant).astimezone(tz)
    return datetime.combine(target_date, time(local.hour, local.minute), tzinfo=tz)


def day_bounds_utc(target_date: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """[start, end) of the civil day as UTC instants, for range queries on the store."""
    start = datetime.combine(target_date, time.min, tzinfo=tz)
    end = datetime.combine(target_date + timedelta(days=1), time.min, tzinfo=tz)
    return to_storage(start), to_storage(end)


def can_client_cancel(appointment_time: datetime, now: datetime, min_hours: int = 12) -> bool:
    return as_utc(appointment_time) - as_utc(now) >= timedelta(hours=min_hours)
