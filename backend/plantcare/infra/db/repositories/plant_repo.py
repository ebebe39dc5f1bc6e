"""Plant repository implementation."""
from datetime import datetime
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select, update

from plantcare.domain.plants.models import Plant
from plantcare.domain.plants.services import PlantRepository
from plantcare.infra.db.models import PlantModel


class PlantRepositoryImpl(PlantRepository):
    """Plant repository. Reads and writes on behalf of a user filter by user_id."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, plant: Plant) -> Plant:
        """Create a plant."""
        model = PlantModel.from_entity(plant)
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return model.to_entity()

    async def find_plant(self, plant_id: str, user_id: str) -> Optional[Plant]:
        """Get a plant by ID if it belongs to the user."""
        result = await self.session.execute(
            select(PlantModel).where(PlantModel.id == plant_id, PlantModel.user_id == user_id)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def list_by_user(self, user_id: str) -> list[Plant]:
        """List a user's plants, newest first."""
        result = await self.session.execute(
            select(PlantModel)
            .where(PlantModel.user_id == user_id)
            .order_by(PlantModel.created_at.desc())
        )
        return [m.to_entity() for m in result.scalars().all()]

    async def update_fields(
        self, plant_id: str, user_id: str, values: dict[str, Any]
    ) -> Optional[Plant]:
        """Update columns of an owned plant. Returns None when not found."""
        result = await self.session.execute(
            update(PlantModel)
            .where(PlantModel.id == plant_id, PlantModel.user_id == user_id)
            .values(**values)
        )
        await self.session.commit()
        if result.rowcount == 0:
            return None
        return await self.find_plant(plant_id, user_id)

    async def update_next_watering(self, plant_id: str, next_watering_at: datetime) -> None:
        """Persist a recomputed due time."""
        await self.session.execute(
            update(PlantModel)
            .where(PlantModel.id == plant_id)
            .values(next_watering_at=next_watering_at)
        )
        await self.session.commit()

    async def delete_for_user(self, plant_id: str, user_id: str) -> bool:
        """Delete an owned plant (waterings cascade). Returns True if deleted."""
        result = await self.session.execute(
            delete(PlantModel).where(PlantModel.id == plant_id, PlantModel.user_id == user_id)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def list_due_by(
        self, timestamp: datetime, user_id: Optional[str] = None
    ) -> list[Plant]:
        """Plants due at or before timestamp, earliest due first. All users when user_id is None."""
        q = (
            select(PlantModel)
            .where(PlantModel.next_watering_at <= timestamp)
            .order_by(PlantModel.next_watering_at.asc())
        )
        if user_id is not None:
            q = q.where(PlantModel.user_id == user_id)
        result = await self.session.execute(q)
        return [m.to_entity() for m in result.scalars().all()]

    async def list_due_between(
        self, start: datetime, end: datetime, user_id: str
    ) -> list[Plant]:
        """Plants of a user due in [start, end], earliest first."""
        result = await self.session.execute(
            select(PlantModel)
            .where(
                PlantModel.user_id == user_id,
                PlantModel.next_watering_at >= start,
                PlantModel.next_watering_at <= end,
            )
            .order_by(PlantModel.next_watering_at.asc())
        )
        return [m.to_entity() for m in result.scalars().all()]
