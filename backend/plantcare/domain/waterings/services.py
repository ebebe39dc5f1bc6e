"""Watering log services.

Recording or deleting a watering changes the plant's due time; both happen in
the same request, one after the other, so the cached ``next_watering_at`` never
lags the log it is derived from.
"""
import logging
from datetime import datetime, timedelta, tzinfo
from typing import Optional

from pydantic import BaseModel

from plantcare.domain.common.errors import NotFoundError
from plantcare.domain.common.types import utcnow
from plantcare.domain.plants.models import Watering
from plantcare.domain.plants.services import (
    PlantRepository,
    WateringRepository,
    refresh_next_watering,
)

logger = logging.getLogger(__name__)


class WateringStats(BaseModel):
    """Aggregate numbers for the dashboard."""

    total_waterings: int
    recent_waterings: int
    average_amount_ml: int


class WateringDay(BaseModel):
    """Waterings of one calendar day (UTC)."""

    date: str
    count: int
    total_amount: int
    waterings: list[Watering]


class WateringHistory(BaseModel):
    """Per-day history for the chart, newest day first."""

    history: list[WateringDay]
    total_waterings: int
    total_amount: int


class WateringService:
    """Watering service."""

    def __init__(
        self,
        watering_repo: WateringRepository,
        plant_repo: PlantRepository,
        tz: Optional[tzinfo] = None,
    ):
        self.watering_repo = watering_repo
        self.plant_repo = plant_repo
        self.tz = tz

    async def _owned_plant(self, plant_id: str, user_id: str):
        plant = await self.plant_repo.find_plant(plant_id, user_id)
        if not plant:
            raise NotFoundError("Plant", plant_id)
        return plant

    async def record_watering(
        self,
        user_id: str,
        plant_id: str,
        amount_ml: int,
        note: Optional[str] = None,
        watered_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> Watering:
        """Log a watering and reschedule the plant from its latest watering.

        A backdated watering older than the latest one leaves the due time unchanged.
        """
        plant = await self._owned_plant(plant_id, user_id)
        watering = Watering.create(
            plant_id=plant.id,
            user_id=user_id,
            amount_ml=amount_ml,
            note=note,
            watered_at=watered_at or now,
        )
        created = await self.watering_repo.create(watering)
        await refresh_next_watering(
            plant, self.plant_repo, self.watering_repo, now=now, tz=self.tz
        )
        logger.info(
            "Recorded watering %s for plant %s (%s ml)", created.id, plant.id, amount_ml
        )
        return created

    async def delete_watering(
        self, watering_id: str, user_id: str, now: Optional[datetime] = None
    ) -> None:
        """Delete a watering; the due time falls back to the latest remaining one (or now)."""
        watering = await self.watering_repo.get_for_user(watering_id, user_id)
        if not watering:
            raise NotFoundError("Watering", watering_id)
        plant = await self._owned_plant(watering.plant_id, user_id)
        await self.watering_repo.delete_for_user(watering_id, user_id)
        await refresh_next_watering(
            plant, self.plant_repo, self.watering_repo, now=now, tz=self.tz
        )
        logger.info("Deleted watering %s of plant %s", watering_id, plant.id)

    async def get_watering(self, watering_id: str, user_id: str) -> Watering:
        watering = await self.watering_repo.get_for_user(watering_id, user_id)
        if not watering:
            raise NotFoundError("Watering", watering_id)
        return watering

    async def list_waterings(
        self, user_id: str, plant_id: Optional[str] = None
    ) -> list[Watering]:
        """All waterings of the user, newest first; plant_id must be owned when given."""
        if plant_id:
            await self._owned_plant(plant_id, user_id)
        return await self.watering_repo.list_for_user(user_id, plant_id=plant_id)

    async def get_stats(
        self, user_id: str, plant_id: Optional[str] = None, now: Optional[datetime] = None
    ) -> WateringStats:
        """Totals, count over the last 30 days and average amount."""
        if plant_id:
            await self._owned_plant(plant_id, user_id)
        since = (now or utcnow()) - timedelta(days=30)
        total = await self.watering_repo.count(user_id, plant_id=plant_id)
        recent = await self.watering_repo.count(user_id, plant_id=plant_id, since=since)
        average = await self.watering_repo.average_amount(user_id, plant_id=plant_id)
        return WateringStats(
            total_waterings=total,
            recent_waterings=recent,
            average_amount_ml=round(average or 0),
        )

    async def get_history(
        self, user_id: str, days: int = 30, now: Optional[datetime] = None
    ) -> WateringHistory:
        """Waterings of the last ``days`` days grouped by date."""
        since = (now or utcnow()) - timedelta(days=days)
        waterings = await self.watering_repo.list_for_user(user_id, since=since)

        by_date: dict[str, WateringDay] = {}
        for watering in waterings:
            key = watering.created_at.date().isoformat()
            day = by_date.get(key)
            if day is None:
                day = by_date[key] = WateringDay(date=key, count=0, total_amount=0, waterings=[])
            day.count += 1
            day.total_amount += watering.amount_ml
            day.waterings.append(watering)

        return WateringHistory(
            history=sorted(by_date.values(), key=lambda d: d.date, reverse=True),
            total_waterings=len(waterings),
            total_amount=sum(w.amount_ml for w in waterings),
        )
