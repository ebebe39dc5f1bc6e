"""Plant domain services and the next-watering recomputation."""
import logging
from datetime import datetime, timedelta, tzinfo
from typing import Any, Optional, Protocol

from plantcare.domain.common.errors import NotFoundError
from plantcare.domain.common.types import utcnow
from plantcare.domain.plants.models import (
    DuePlant,
    Plant,
    PlantDetails,
    PlantOverview,
    UpcomingPlant,
    Watering,
)
from plantcare.domain.plants.schedule import (
    compute_next_watering,
    days_overdue,
    days_until,
    next_watering_from_log,
)

logger = logging.getLogger(__name__)

# Fields a plant update may touch; next_watering_at is derived, never set directly.
EDITABLE_FIELDS = (
    "name",
    "species",
    "purchase_date",
    "image_url",
    "notes",
    "location",
    "water_amount_ml",
    "water_frequency_days",
)
# Editable fields that cannot be cleared; None for them means "unchanged"
REQUIRED_FIELDS = ("name", "water_amount_ml", "water_frequency_days")


class PlantRepository(Protocol):
    """Plant repository protocol."""

    async def create(self, plant: Plant) -> Plant:
        ...

    async def find_plant(self, plant_id: str, user_id: str) -> Optional[Plant]:
        """Plant by id, only if owned by user_id."""
        ...

    async def list_by_user(self, user_id: str) -> list[Plant]:
        """Plants of a user, newest first."""
        ...

    async def update_fields(self, plant_id: str, user_id: str, values: dict[str, Any]) -> Optional[Plant]:
        ...

    async def update_next_watering(self, plant_id: str, next_watering_at: datetime) -> None:
        ...

    async def delete_for_user(self, plant_id: str, user_id: str) -> bool:
        ...

    async def list_due_by(self, timestamp: datetime, user_id: Optional[str] = None) -> list[Plant]:
        """Plants with next_watering_at <= timestamp, earliest first."""
        ...

    async def list_due_between(self, start: datetime, end: datetime, user_id: str) -> list[Plant]:
        """Plants with start <= next_watering_at <= end, earliest first."""
        ...


class WateringRepository(Protocol):
    """Watering repository protocol."""

    async def create(self, watering: Watering) -> Watering:
        ...

    async def get_for_user(self, watering_id: str, user_id: str) -> Optional[Watering]:
        ...

    async def delete_for_user(self, watering_id: str, user_id: str) -> bool:
        ...

    async def find_latest(self, plant_id: str) -> Optional[Watering]:
        """Most recent watering of a plant by event time."""
        ...

    async def list_for_user(
        self,
        user_id: str,
        plant_id: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Watering]:
        """Waterings newest first, optionally filtered."""
        ...

    async def count(
        self, user_id: str, plant_id: Optional[str] = None, since: Optional[datetime] = None
    ) -> int:
        ...

    async def average_amount(self, user_id: str, plant_id: Optional[str] = None) -> Optional[float]:
        ...


async def refresh_next_watering(
    plant: Plant,
    plant_repo: PlantRepository,
    watering_repo: WateringRepository,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> datetime:
    """Recompute and persist ``plant.next_watering_at`` from its watering log."""
    latest = await watering_repo.find_latest(plant.id)
    next_at = next_watering_from_log(
        latest.created_at if latest else None,
        plant.water_frequency_days,
        now or utcnow(),
        tz,
    )
    await plant_repo.update_next_watering(plant.id, next_at)
    logger.debug(
        "Plant %s next watering -> %s (from %s)",
        plant.id,
        next_at.isoformat(),
        "latest watering" if latest else "now",
    )
    return next_at


class PlantService:
    """Plant service. Every operation is scoped to the owning user."""

    def __init__(
        self,
        plant_repo: PlantRepository,
        watering_repo: WateringRepository,
        tz: Optional[tzinfo] = None,
    ):
        self.plant_repo = plant_repo
        self.watering_repo = watering_repo
        self.tz = tz

    async def get_owned_plant(self, plant_id: str, user_id: str) -> Plant:
        """Plant owned by user_id; foreign and missing plants look the same."""
        plant = await self.plant_repo.find_plant(plant_id, user_id)
        if not plant:
            raise NotFoundError("Plant", plant_id)
        return plant

    async def create_plant(
        self,
        user_id: str,
        name: str,
        water_amount_ml: int,
        water_frequency_days: int,
        now: Optional[datetime] = None,
        **optional: Any,
    ) -> Plant:
        """Create a plant; a new plant has no waterings so it is due one period from now."""
        now = now or utcnow()
        plant = Plant.create(
            user_id=user_id,
            name=name,
            water_amount_ml=water_amount_ml,
            water_frequency_days=water_frequency_days,
            next_watering_at=compute_next_watering(now, water_frequency_days, self.tz),
            created_at=now,
            **{k: v for k, v in optional.items() if k in EDITABLE_FIELDS},
        )
        created = await self.plant_repo.create(plant)
        logger.info("Created plant %s for user %s", created.id, user_id)
        return created

    async def list_plants(self, user_id: str) -> list[PlantOverview]:
        """Plants newest first with latest watering and watering count."""
        plants = await self.plant_repo.list_by_user(user_id)
        overviews = []
        for plant in plants:
            latest = await self.watering_repo.find_latest(plant.id)
            total = await self.watering_repo.count(user_id, plant_id=plant.id)
            overviews.append(
                PlantOverview(**plant.model_dump(), last_watering=latest, total_waterings=total)
            )
        return overviews

    async def get_plant(self, plant_id: str, user_id: str) -> PlantDetails:
        """Plant with its five most recent waterings."""
        plant = await self.get_owned_plant(plant_id, user_id)
        recent = await self.watering_repo.list_for_user(user_id, plant_id=plant.id, limit=5)
        total = await self.watering_repo.count(user_id, plant_id=plant.id)
        return PlantDetails(**plant.model_dump(), waterings=recent, total_waterings=total)

    async def update_plant(
        self, plant_id: str, user_id: str, now: Optional[datetime] = None, **changes: Any
    ) -> Plant:
        """Apply field changes; None clears an optional field.

        A new frequency recomputes the due time from the log.
        """
        existing = await self.get_owned_plant(plant_id, user_id)
        values = {
            k: v
            for k, v in changes.items()
            if k in EDITABLE_FIELDS and not (v is None and k in REQUIRED_FIELDS)
        }
        if not values:
            return existing

        values["updated_at"] = utcnow()
        plant = await self.plant_repo.update_fields(plant_id, user_id, values)
        if plant is None:
            raise NotFoundError("Plant", plant_id)

        if plant.water_frequency_days != existing.water_frequency_days:
            # Never derived from the old due time, so frequency edits cannot compound drift
            next_at = await refresh_next_watering(
                plant, self.plant_repo, self.watering_repo, now=now, tz=self.tz
            )
            plant = plant.model_copy(update={"next_watering_at": next_at})
            logger.info(
                "Plant %s frequency %s -> %s days",
                plant_id,
                existing.water_frequency_days,
                plant.water_frequency_days,
            )
        return plant

    async def delete_plant(self, plant_id: str, user_id: str) -> None:
        """Delete a plant and its waterings."""
        deleted = await self.plant_repo.delete_for_user(plant_id, user_id)
        if not deleted:
            raise NotFoundError("Plant", plant_id)
        logger.info("Deleted plant %s for user %s", plant_id, user_id)

    async def plants_needing_water(
        self, user_id: str, now: Optional[datetime] = None
    ) -> list[DuePlant]:
        """Plants past their due time, most overdue first."""
        now = now or utcnow()
        plants = await self.plant_repo.list_due_by(now, user_id=user_id)
        due = []
        for plant in plants:
            latest = await self.watering_repo.find_latest(plant.id)
            due.append(
                DuePlant(
                    **plant.model_dump(),
                    last_watering=latest,
                    days_overdue=days_overdue(plant.next_watering_at, now),
                )
            )
        return due

    async def upcoming_waterings(
        self, user_id: str, days: int = 7, now: Optional[datetime] = None
    ) -> list[UpcomingPlant]:
        """Plants due between now and now + days, soonest first."""
        now = now or utcnow()
        plants = await self.plant_repo.list_due_between(now, now + timedelta(days=days), user_id)
        return [
            UpcomingPlant(
                **plant.model_dump(),
                days_until_watering=days_until(plant.next_watering_at, now),
            )
            for plant in plants
        ]
