"""User repository implementation."""
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, func, select, update

from plantcare.domain.common.types import utcnow
from plantcare.domain.users.models import User, UserStats
from plantcare.domain.users.services import UserRepository
from plantcare.infra.db.models import PlantModel, UserModel, WateringModel


class UserRepositoryImpl(UserRepository):
    """User repository implementation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user."""
        model = UserModel.from_entity(user)
        self.session.add(model)
        await self.session.commit()
        await self.session.refresh(model)
        return model.to_entity()

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        result = await self.session.execute(select(UserModel).where(UserModel.id == user_id))
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        result = await self.session.execute(select(UserModel).where(UserModel.email == email))
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def update_profile_fields(
        self,
        user_id: str,
        email: Optional[str] = None,
        firstname: Optional[str] = None,
        lastname: Optional[str] = None,
    ) -> Optional[User]:
        """Update profile fields that are not None."""
        update_values = {}
        if email is not None:
            update_values["email"] = email
        if firstname is not None:
            update_values["firstname"] = firstname
        if lastname is not None:
            update_values["lastname"] = lastname

        if update_values:
            update_values["updated_at"] = utcnow()
            await self.session.execute(
                update(UserModel).where(UserModel.id == user_id).values(**update_values)
            )
            await self.session.commit()

        return await self.get_by_id(user_id)

    async def delete(self, user_id: str) -> bool:
        """Delete user; plants, waterings and subscriptions go with it (FK cascade)."""
        result = await self.session.execute(delete(UserModel).where(UserModel.id == user_id))
        await self.session.commit()
        return result.rowcount > 0

    async def get_stats(self, user_id: str) -> UserStats:
        """Count plants and waterings owned by the user."""
        plants = await self.session.execute(
            select(func.count()).select_from(PlantModel).where(PlantModel.user_id == user_id)
        )
        waterings = await self.session.execute(
            select(func.count()).select_from(WateringModel).where(WateringModel.user_id == user_id)
        )
        return UserStats(
            total_plants=plants.scalar() or 0,
            total_waterings=waterings.scalar() or 0,
        )
