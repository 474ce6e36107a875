from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from barbearia.core import (
    as_utc,
    can_client_cancel,
    day_bounds_utc,
    local_on_date,
    shop_timezone,
    to_storage,
    truncate_to_minute,
)

SP = ZoneInfo("America/Sao_Paulo")


def test_shop_timezone_comes_from_settings():
    assert shop_timezone() == SP


def test_local_on_date_uses_local_wall_clock():
    # 01:30 UTC on the 10th is 22:30 on the 9th in São Paulo
    result = local_on_date(datetime(2025, 3, 10, 1, 30), date(2025, 3, 10), SP)

    assert result == datetime(2025, 3, 10, 22, 30, tzinfo=SP)


def test_local_on_date_drops_seconds():
    result = local_on_date(datetime(2025, 3, 10, 12, 45, 59, 999999), date(2025, 3, 10), SP)

    assert (result.hour, result.minute, result.second, result.microsecond) == (9, 45, 0, 0)


def test_local_on_date_accepts_aware_instants():
    instant = datetime(2025, 3, 10, 9, 0, tzinfo=ZoneInfo("Asia/Tokyo"))

    # 09:00 in Tokyo is 21:00 the previous evening in São Paulo
    assert local_on_date(instant, date(2025, 3, 9), SP) == datetime(2025, 3, 9, 21, 0, tzinfo=SP)


def test_to_storage_localises_naive_input():
    assert to_storage(datetime(2025, 3, 11, 9, 45)) == datetime(2025, 3, 11, 12, 45, tzinfo=timezone.utc)


def test_to_storage_converts_aware_input():
    stored = to_storage(datetime(2025, 3, 11, 9, 45, tzinfo=SP))

    assert stored == datetime(2025, 3, 11, 12, 45, tzinfo=timezone.utc)
    assert stored.utcoffset() == timedelta(0)


def test_as_utc_treats_naive_as_stored_utc():
    assert as_utc(datetime(2025, 3, 11, 12, 45)) == datetime(2025, 3, 11, 12, 45, tzinfo=timezone.utc)


def test_day_bounds_follow_the_civil_day():
    start, end = day_bounds_utc(date(2025, 3, 11), SP)

    assert start == datetime(2025, 3, 11, 3, 0, tzinfo=timezone.utc)
    assert end == datetime(2025, 3, 12, 3, 0, tzinfo=timezone.utc)


def test_truncate_to_minute():
    assert truncate_to_minute(datetime(2025, 3, 11, 9, 0, 30, 500)) == datetime(2025, 3, 11, 9, 0)


def test_client_cancel_window():
    appointment = datetime(2025, 3, 11, 12, 45)  # as SQLite returns it, UTC
    exactly = datetime.combine(date(2025, 3, 11), time(0, 45), tzinfo=timezone.utc)

    assert can_client_cancel(appointment, exactly)
    assert not can_client_cancel(appointment, exactly + timedelta(minutes=1))
    assert can_client_cancel(appointment, exactly + timedelta(hours=6), min_hours=6)
