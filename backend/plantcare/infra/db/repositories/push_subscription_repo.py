"""Push subscription repository implementation."""
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select, update

from plantcare.domain.common.errors import ConflictError
from plantcare.domain.notifications.models import PushSubscription
from plantcare.domain.notifications.services import PushSubscriptionRepository
from plantcare.infra.db.models import PushSubscriptionModel


class PushSubscriptionRepositoryImpl(PushSubscriptionRepository):
    """Push subscription repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_endpoint(self, user_id: str, endpoint: str) -> Optional[PushSubscription]:
        result = await self.session.execute(
            select(PushSubscriptionModel).where(
                PushSubscriptionModel.user_id == user_id,
                PushSubscriptionModel.endpoint == endpoint,
            )
        )
        model = result.scalar_one_or_none()
        return model.to_entity() if model else None

    async def create(self, subscription: PushSubscription) -> PushSubscription:
        """Insert a subscription; a concurrent duplicate endpoint is a conflict."""
        model = PushSubscriptionModel(**subscription.model_dump())
        self.session.add(model)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ConflictError("Push subscription already exists for this endpoint") from e
        await self.session.refresh(model)
        return model.to_entity()

    async def update_keys(self, subscription_id: str, p256dh: str, auth: str) -> PushSubscription:
        """Replace the encryption keys of a subscription."""
        await self.session.execute(
            update(PushSubscriptionModel)
            .where(PushSubscriptionModel.id == subscription_id)
            .values(p256dh=p256dh, auth=auth)
        )
        await self.session.commit()
        result = await self.session.execute(
            select(PushSubscriptionModel).where(PushSubscriptionModel.id == subscription_id)
        )
        return result.scalar_one().to_entity()

    async def list_by_user(self, user_id: str) -> list[PushSubscription]:
        """Subscriptions of a user, oldest first."""
        result = await self.session.execute(
            select(PushSubscriptionModel)
            .where(PushSubscriptionModel.user_id == user_id)
            .order_by(PushSubscriptionModel.created_at.asc())
        )
        return [m.to_entity() for m in result.scalars().all()]

    async def delete(self, subscription_id: str) -> bool:
        """Delete by id (used when the push service reports the endpoint gone)."""
        result = await self.session.execute(
            delete(PushSubscriptionModel).where(PushSubscriptionModel.id == subscription_id)
        )
        await self.session.commit()
        return result.rowcount > 0

    async def delete_by_endpoint(self, user_id: str, endpoint: str) -> bool:
        """Delete a user's subscription for an endpoint."""
        result = await self.session.execute(
            delete(PushSubscriptionModel).where(
                PushSubscriptionModel.user_id == user_id,
                PushSubscriptionModel.endpoint == endpoint,
            )
        )
        await self.session.commit()
        return result.rowcount > 0
