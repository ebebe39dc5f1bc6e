"""Tests for next-watering arithmetic."""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from plantcare.domain.plants.schedule import (
    compute_next_watering,
    days_overdue,
    days_until,
    get_zone,
    next_watering_from_log,
)


def test_adds_whole_calendar_days_in_utc():
    ref = datetime(2024, 3, 1, 8, 30)
    assert compute_next_watering(ref, 7) == datetime(2024, 3, 8, 8, 30)


def test_crosses_month_and_leap_day():
    assert compute_next_watering(datetime(2024, 2, 27, 12, 0), 3) == datetime(2024, 3, 1, 12, 0)


@pytest.mark.parametrize("frequency", [0, -1])
def test_rejects_frequency_below_one(frequency):
    with pytest.raises(ValueError):
        compute_next_watering(datetime(2024, 1, 1), frequency)


def test_keeps_local_wall_clock_across_dst():
    paris = ZoneInfo("Europe/Paris")
    # 2024-03-30 08:00 CET is 07:00 UTC; a day later Paris is on CEST (UTC+2)
    ref = datetime(2024, 3, 30, 7, 0)
    result = compute_next_watering(ref, 1, paris)
    assert result == datetime(2024, 3, 31, 6, 0)
    local = result.replace(tzinfo=timezone.utc).astimezone(paris)
    assert (local.hour, local.minute) == (8, 0)


def test_aware_input_keeps_its_timezone():
    ref = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
    result = compute_next_watering(ref, 2)
    assert result == datetime(2024, 5, 3, 10, 0, tzinfo=timezone.utc)
    assert result.tzinfo is not None


def test_from_log_uses_latest_watering_when_present():
    now = datetime(2024, 6, 10, 12, 0)
    latest = datetime(2024, 6, 8, 9, 0)
    assert next_watering_from_log(latest, 3, now) == datetime(2024, 6, 11, 9, 0)


def test_from_log_falls_back_to_now():
    now = datetime(2024, 6, 10, 12, 0)
    assert next_watering_from_log(None, 3, now) == now + timedelta(days=3)


def test_days_overdue_floors():
    now = datetime(2024, 6, 10, 12, 0)
    assert days_overdue(now - timedelta(hours=5), now) == 0
    assert days_overdue(now - timedelta(days=2, hours=23), now) == 2


def test_days_until_ceils():
    now = datetime(2024, 6, 10, 12, 0)
    assert days_until(now + timedelta(hours=1), now) == 1
    assert days_until(now + timedelta(days=2), now) == 2
    assert days_until(now, now) == 0


def test_get_zone():
    assert get_zone("") is timezone.utc
    assert get_zone("utc") is timezone.utc
    assert get_zone("Europe/Paris") == ZoneInfo("Europe/Paris")
