"""Tests for the reminder scheduler."""
import asyncio
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from plantcare.domain.plants.services import PlantService
from plantcare.infra.db.repositories.plant_repo import PlantRepositoryImpl
from plantcare.infra.db.repositories.watering_repo import WateringRepositoryImpl
from plantcare.infra.jobs.scheduler import ReminderScheduler, next_daily_run


def test_next_daily_run_later_today():
    now = datetime(2024, 6, 1, 6, 30, tzinfo=timezone.utc)
    assert next_daily_run(now, 9, timezone.utc) == datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)


def test_next_daily_run_rolls_to_tomorrow():
    now = datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)
    assert next_daily_run(now, 9, timezone.utc) == datetime(2024, 6, 2, 9, 0, tzinfo=timezone.utc)


def test_next_daily_run_in_local_time_across_dst():
    paris = ZoneInfo("Europe/Paris")
    # 10:00 Paris (CET) on the day before the spring change
    now = datetime(2024, 3, 30, 9, 0, tzinfo=timezone.utc)
    result = next_daily_run(now, 9, paris)
    # 09:00 CEST is 07:00 UTC
    assert result == datetime(2024, 3, 31, 7, 0, tzinfo=timezone.utc)


async def test_runs_are_serialized(session_factory, user, monkeypatch):
    async with session_factory() as session:
        await PlantService(PlantRepositoryImpl(session), WateringRepositoryImpl(session)).create_plant(
            user.id,
            name="Fern",
            water_amount_ml=100,
            water_frequency_days=1,
            now=datetime(2024, 1, 1),
        )

    active = 0
    peak = 0

    async def slow_send(self, user_id, title, body, data=None):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        active -= 1
        return []

    monkeypatch.setattr(
        "plantcare.infra.jobs.scheduler.WebPushDispatcher.send_to_user", slow_send
    )
    scheduler = ReminderScheduler(session_factory)
    now = datetime(2024, 2, 1)
    reports = await asyncio.gather(
        scheduler.run_due_check(now), scheduler.run_daily_digest(now), scheduler.run_due_check(now)
    )
    assert peak == 1
    assert all(r.plants_due == 1 for r in reports)


async def test_start_and_stop(session_factory):
    scheduler = ReminderScheduler(session_factory, interval_minutes=60)
    scheduler.start()
    await asyncio.sleep(0)
    await scheduler.stop()
    assert scheduler._task is None
