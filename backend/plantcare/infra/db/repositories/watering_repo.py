"""Watering repository implementation."""
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, func, select
from sqlalchemy.orm import selectinload

from plantcare.domain.plants.models import Watering
from plantcare.domain.plants.services import WateringRepository
from plantcare.infra.db.models import WateringModel


class WateringRepositoryImpl(WateringRepository):
    """Watering repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _scoped(self, q, user_id: str, plant_id: Optional[str], since: Optional[datetime]):
        q = q.where(WateringModel.user_id == user_id)
        if plant_id is not None:
            q = q.where(WateringModel.plant_id == plant_id)
        if since is not None:
            q = q.where(WateringModel.created_at >= since)
        return q

    async def create(self, watering: Watering) -> Watering:
        """Create a watering."""
        model = WateringModel(**watering.model_dump(exclude={"plant"}))
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return model.to_entity()

    async def get_for_user(self, watering_id: str, user_id: str) -> Optional[Watering]:
        """Get a watering by ID if it belongs to the user."""
        result = await self.session.execute(
            select(WateringModel)
            .where(WateringModel.id == watering_id, WateringModel.user_id == user_id)
            .options(selectinload(WateringModel.plant))
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return model.to_entity(with_plant=True) if model else None

    async def delete_for_user(self, watering_id: str, user_id: str) -> bool:
        """Delete a watering if it belongs to the user. Returns True if deleted."""
        result = await self.session.execute(
            delete(WateringModel).where(
                WateringModel.id == watering_id,
                WateringModel.user_id == user_id,
            )
        )
        await self.session.commit()
        return result.rowcount > 0

    async def find_latest(self, plant_id: str) -> Optional[Watering]:
        """Most recent watering of a plant by event time."""
        result = await self.session.execute(
            select(WateringModel)
            .where(WateringModel.plant_id == plant_id)
            .order_by(WateringModel.created_at.desc(), WateringModel.id.desc())
            .limit(1)
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def list_for_user(
        self,
        user_id: str,
        plant_id: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Watering]:
        """Waterings newest first, each with its plant summary."""
        q = (
            self._scoped(select(WateringModel), user_id, plant_id, since)
            .options(selectinload(WateringModel.plant))
            .execution_options(populate_existing=True)
            .order_by(WateringModel.created_at.desc())
        )
        if limit is not None:
            q = q.limit(limit)
        result = await self.session.execute(q)
        return [m.to_entity(with_plant=True) for m in result.scalars().all()]

    async def count(
        self, user_id: str, plant_id: Optional[str] = None, since: Optional[datetime] = None
    ) -> int:
        """Count waterings."""
        q = self._scoped(select(func.count()).select_from(WateringModel), user_id, plant_id, since)
        result = await self.session.execute(q)
        return result.scalar() or 0

    async def average_amount(self, user_id: str, plant_id: Optional[str] = None) -> Optional[float]:
        """Average amount in ml, None when there are no waterings."""
        q = self._scoped(select(func.avg(WateringModel.amount_ml)), user_id, plant_id, None)
        result = await self.session.execute(q)
        value = result.scalar()
        return float(value) if value is not None else None
