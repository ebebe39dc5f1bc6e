"""Tests for the due-plant scanner and grouped reminders."""
from datetime import datetime, timedelta

import pytest

from plantcare.domain.notifications.models import DeliveryResult
from plantcare.domain.plants.services import PlantService
from plantcare.domain.reminders.services import (
    DAILY_DIGEST_TYPE,
    DUE_REMINDER_TYPE,
    ReminderService,
    build_daily_digest,
    build_due_reminder,
)
from plantcare.infra.db.repositories.plant_repo import PlantRepositoryImpl
from plantcare.infra.db.repositories.watering_repo import WateringRepositoryImpl

NOW = datetime(2024, 6, 1, 9, 0)


class FakeDispatcher:
    """Records what would be sent; can be told to fail for some users."""

    def __init__(self, failing_users=()):
        self.sent = []
        self.failing_users = set(failing_users)

    async def send_to_user(self, user_id, title, body, data=None):
        if user_id in self.failing_users:
            raise RuntimeError("push service down")
        self.sent.append({"user_id": user_id, "title": title, "body": body, "data": data})
        return [DeliveryResult(subscription_id="s1", endpoint="https://push.example/1", ok=True)]


@pytest.fixture
def plant_service(db_session):
    return PlantService(PlantRepositoryImpl(db_session), WateringRepositoryImpl(db_session))


async def add_plant(plant_service, user_id, name, frequency, created):
    return await plant_service.create_plant(
        user_id, name=name, water_amount_ml=100, water_frequency_days=frequency, now=created
    )


async def test_empty_scan_sends_nothing(db_session):
    dispatcher = FakeDispatcher()
    report = await ReminderService(PlantRepositoryImpl(db_session), dispatcher).run_due_check(NOW)
    assert dispatcher.sent == []
    assert report.users_notified == 0
    assert report.plants_due == 0


async def test_due_plants_grouped_into_one_notification(db_session, plant_service, user):
    for i in range(3):
        await add_plant(plant_service, user.id, f"Due {i}", 1, NOW - timedelta(days=2 + i))
    for i in range(2):
        await add_plant(plant_service, user.id, f"Fine {i}", 7, NOW)

    dispatcher = FakeDispatcher()
    report = await ReminderService(PlantRepositoryImpl(db_session), dispatcher).run_due_check(NOW)

    assert len(dispatcher.sent) == 1
    sent = dispatcher.sent[0]
    assert sent["user_id"] == user.id
    assert sent["title"] == "🌱 Time to water!"
    assert sent["body"] == "3 plants need water"
    assert sent["data"]["type"] == DUE_REMINDER_TYPE
    assert sent["data"]["plantCount"] == 3
    assert report.users_notified == 1
    assert report.plants_due == 3
    assert report.deliveries == 1


async def test_single_due_plant_is_named(db_session, plant_service, user):
    await add_plant(plant_service, user.id, "Monstera", 1, NOW - timedelta(days=2))
    dispatcher = FakeDispatcher()
    await ReminderService(PlantRepositoryImpl(db_session), dispatcher).run_due_check(NOW)
    assert dispatcher.sent[0]["body"] == "Monstera needs water"


async def test_one_user_failing_does_not_stop_others(db_session, plant_service, user, other_user):
    await add_plant(plant_service, user.id, "Mine", 1, NOW - timedelta(days=2))
    await add_plant(plant_service, other_user.id, "Theirs", 1, NOW - timedelta(days=2))

    dispatcher = FakeDispatcher(failing_users={user.id})
    report = await ReminderService(PlantRepositoryImpl(db_session), dispatcher).run_due_check(NOW)

    assert [s["user_id"] for s in dispatcher.sent] == [other_user.id]
    assert report.failed == 1
    assert report.users_notified == 1


async def test_daily_digest_includes_plants_due_within_a_day(db_session, plant_service, user):
    await add_plant(plant_service, user.id, "Tomorrow", 1, NOW - timedelta(hours=2))
    await add_plant(plant_service, user.id, "Next week", 7, NOW)

    dispatcher = FakeDispatcher()
    report = await ReminderService(PlantRepositoryImpl(db_session), dispatcher).run_daily_digest(NOW)

    assert report.plants_due == 1
    assert dispatcher.sent[0]["title"] == "🌿 Daily reminder"
    assert dispatcher.sent[0]["body"] == "Tomorrow needs attention today"
    assert dispatcher.sent[0]["data"]["type"] == DAILY_DIGEST_TYPE


def test_payload_builders_pluralize():
    class P:
        def __init__(self, i):
            self.id = f"p{i}"
            self.name = f"Plant {i}"

    assert build_due_reminder([P(1), P(2)]).body == "2 plants need water"
    assert build_daily_digest([P(1), P(2), P(3)]).body == "3 plants to check today"
    assert build_due_reminder([P(1)]).data["plantIds"] == ["p1"]
