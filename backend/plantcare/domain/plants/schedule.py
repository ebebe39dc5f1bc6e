"""Watering schedule rules.

``next_watering_at`` on a plant is a cached projection of its watering log:

    next_watering_at = (latest watering time, or now when the log is empty)
                       + water_frequency_days calendar days

It is recomputed after every event that can change either input: a watering is
recorded or deleted, or the plant's frequency is edited. Nothing else writes it.

All datetimes stored by the service are naive UTC. Day arithmetic happens on
the wall clock of ``tz`` (the configured schedule timezone) so that a plant
watered at 08:00 local time is due at 08:00 local time, even across a DST
change.
"""
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from zoneinfo import ZoneInfo

SECONDS_PER_DAY = 24 * 60 * 60


def compute_next_watering(
    reference_time: datetime, frequency_days: int, tz: Optional[tzinfo] = None
) -> datetime:
    """Return ``reference_time`` plus ``frequency_days`` calendar days.

    Naive inputs are read as UTC and the result is naive UTC; aware inputs give
    an aware result in the same timezone as the input.
    """
    if frequency_days < 1:
        raise ValueError(f"frequency_days must be >= 1, got {frequency_days}")
    tz = tz or timezone.utc
    naive = reference_time.tzinfo is None
    aware = reference_time.replace(tzinfo=timezone.utc) if naive else reference_time

    local = aware.astimezone(tz)
    wall = local.replace(tzinfo=None) + timedelta(days=frequency_days)
    # fold=0 picks the earlier of two ambiguous wall times; nonexistent ones shift forward
    shifted = wall.replace(tzinfo=tz).astimezone(timezone.utc)

    if naive:
        return shifted.replace(tzinfo=None)
    return shifted.astimezone(reference_time.tzinfo)


def next_watering_from_log(
    latest_watered_at: Optional[datetime],
    frequency_days: int,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> datetime:
    """Apply the recomputation rule: latest watering if any, otherwise ``now``."""
    reference = latest_watered_at if latest_watered_at is not None else now
    return compute_next_watering(reference, frequency_days, tz)


def days_overdue(next_watering_at: datetime, now: datetime) -> int:
    """Whole days a due plant is late (floor)."""
    return int((now - next_watering_at).total_seconds() // SECONDS_PER_DAY)


def days_until(next_watering_at: datetime, now: datetime) -> int:
    """Whole days until a plant is due (ceiling)."""
    seconds = (next_watering_at - now).total_seconds()
    return int(-(-seconds // SECONDS_PER_DAY))


def get_zone(name: Optional[str]) -> tzinfo:
    """Resolve a timezone name from settings; empty means UTC."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)
