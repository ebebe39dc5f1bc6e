"""Tests for recording and deleting waterings and the due-time recomputation."""
from datetime import datetime, timedelta

import pytest

from plantcare.domain.common.errors import NotFoundError
from plantcare.domain.plants.services import PlantService
from plantcare.domain.waterings.services import WateringService
from plantcare.infra.db.repositories.plant_repo import PlantRepositoryImpl
from plantcare.infra.db.repositories.watering_repo import WateringRepositoryImpl

NOW = datetime(2024, 6, 1, 9, 0)


@pytest.fixture
def plant_service(db_session):
    return PlantService(PlantRepositoryImpl(db_session), WateringRepositoryImpl(db_session))


@pytest.fixture
def watering_service(db_session):
    return WateringService(WateringRepositoryImpl(db_session), PlantRepositoryImpl(db_session))


@pytest.fixture
async def monstera(plant_service, user):
    return await plant_service.create_plant(
        user.id, name="Monstera", water_amount_ml=500, water_frequency_days=7, now=NOW
    )


async def test_new_plant_is_due_one_period_from_now(monstera):
    assert monstera.next_watering_at == NOW + timedelta(days=7)


async def test_record_then_delete_moves_due_time(plant_service, watering_service, user, monstera):
    t1 = NOW + timedelta(days=2)
    watering = await watering_service.record_watering(user.id, monstera.id, 500, now=t1)
    plant = await plant_service.get_owned_plant(monstera.id, user.id)
    assert watering.created_at == t1
    assert plant.next_watering_at == t1 + timedelta(days=7)

    t2 = NOW + timedelta(days=3)
    await watering_service.delete_watering(watering.id, user.id, now=t2)
    plant = await plant_service.get_owned_plant(monstera.id, user.id)
    assert plant.next_watering_at == t2 + timedelta(days=7)


async def test_deleting_older_watering_keeps_latest_as_reference(
    plant_service, watering_service, user, monstera
):
    old = await watering_service.record_watering(
        user.id, monstera.id, 400, watered_at=NOW - timedelta(days=4), now=NOW
    )
    latest = await watering_service.record_watering(user.id, monstera.id, 500, now=NOW)
    await watering_service.delete_watering(old.id, user.id, now=NOW + timedelta(days=1))

    plant = await plant_service.get_owned_plant(monstera.id, user.id)
    assert plant.next_watering_at == latest.created_at + timedelta(days=7)


async def test_backdated_watering_older_than_latest_does_not_move_due_time(
    plant_service, watering_service, user, monstera
):
    await watering_service.record_watering(user.id, monstera.id, 500, now=NOW)
    await watering_service.record_watering(
        user.id, monstera.id, 300, watered_at=NOW - timedelta(days=2), now=NOW
    )
    plant = await plant_service.get_owned_plant(monstera.id, user.id)
    assert plant.next_watering_at == NOW + timedelta(days=7)


async def test_record_on_foreign_plant_is_not_found(watering_service, other_user, monstera):
    with pytest.raises(NotFoundError):
        await watering_service.record_watering(other_user.id, monstera.id, 100)


async def test_delete_foreign_watering_is_not_found(watering_service, user, other_user, monstera):
    watering = await watering_service.record_watering(user.id, monstera.id, 500, now=NOW)
    with pytest.raises(NotFoundError):
        await watering_service.delete_watering(watering.id, other_user.id)
    assert await watering_service.get_watering(watering.id, user.id)


async def test_stats(watering_service, user, monstera):
    now = NOW + timedelta(days=60)
    await watering_service.record_watering(
        user.id, monstera.id, 100, watered_at=now - timedelta(days=45), now=now
    )
    await watering_service.record_watering(user.id, monstera.id, 200, watered_at=now - timedelta(days=1), now=now)
    await watering_service.record_watering(user.id, monstera.id, 250, now=now)

    stats = await watering_service.get_stats(user.id, now=now)
    assert stats.total_waterings == 3
    assert stats.recent_waterings == 2
    assert stats.average_amount_ml == 183


async def test_stats_without_waterings(watering_service, user):
    stats = await watering_service.get_stats(user.id, now=NOW)
    assert stats.model_dump() == {"total_waterings": 0, "recent_waterings": 0, "average_amount_ml": 0}


async def test_history_groups_by_day_newest_first(watering_service, user, monstera):
    day1 = datetime(2024, 6, 10, 8, 0)
    day2 = datetime(2024, 6, 12, 8, 0)
    now = datetime(2024, 6, 12, 20, 0)
    await watering_service.record_watering(user.id, monstera.id, 100, watered_at=day1, now=now)
    await watering_service.record_watering(user.id, monstera.id, 150, watered_at=day1 + timedelta(hours=6), now=now)
    await watering_service.record_watering(user.id, monstera.id, 200, watered_at=day2, now=now)

    history = await watering_service.get_history(user.id, days=30, now=now)
    assert [d.date for d in history.history] == ["2024-06-12", "2024-06-10"]
    assert history.history[0].waterings[0].plant.name == "Monstera"
    assert history.history[1].count == 2
    assert history.history[1].total_amount == 250
    assert history.total_waterings == 3
    assert history.total_amount == 450


async def test_list_filters_by_plant(plant_service, watering_service, user, monstera):
    fern = await plant_service.create_plant(
        user.id, name="Fern", water_amount_ml=200, water_frequency_days=3, now=NOW
    )
    await watering_service.record_watering(user.id, monstera.id, 500, now=NOW)
    await watering_service.record_watering(user.id, fern.id, 200, now=NOW + timedelta(minutes=1))

    assert len(await watering_service.list_waterings(user.id)) == 2
    only_fern = await watering_service.list_waterings(user.id, plant_id=fern.id)
    assert [w.plant_id for w in only_fern] == [fern.id]
    assert only_fern[0].plant.name == "Fern"
    assert only_fern[0].plant.water_frequency_days == 3
    assert {w.plant.name for w in await watering_service.list_waterings(user.id)} == {"Monstera", "Fern"}
