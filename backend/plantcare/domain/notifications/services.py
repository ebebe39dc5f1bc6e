"""Push subscription services and the dispatcher contract."""
import logging
from typing import Any, Optional, Protocol

from plantcare.domain.notifications.models import DeliveryResult, PushSubscription

logger = logging.getLogger(__name__)


class PushSubscriptionRepository(Protocol):
    """Push subscription repository protocol."""

    async def get_by_endpoint(self, user_id: str, endpoint: str) -> Optional[PushSubscription]:
        ...

    async def create(self, subscription: PushSubscription) -> PushSubscription:
        ...

    async def update_keys(self, subscription_id: str, p256dh: str, auth: str) -> PushSubscription:
        ...

    async def list_by_user(self, user_id: str) -> list[PushSubscription]:
        ...

    async def delete(self, subscription_id: str) -> bool:
        ...

    async def delete_by_endpoint(self, user_id: str, endpoint: str) -> bool:
        ...


class NotificationDispatcher(Protocol):
    """Delivers a payload to every subscription of a user and prunes dead ones."""

    async def send_to_user(
        self, user_id: str, title: str, body: str, data: Optional[dict[str, Any]] = None
    ) -> list[DeliveryResult]:
        ...


class SubscriptionService:
    """Subscribe/unsubscribe browsers for push reminders."""

    def __init__(self, repo: PushSubscriptionRepository):
        self.repo = repo

    async def subscribe(self, user_id: str, endpoint: str, p256dh: str, auth: str) -> PushSubscription:
        """Upsert by (user, endpoint): a re-subscribing browser only refreshes its keys."""
        existing = await self.repo.get_by_endpoint(user_id, endpoint)
        if existing:
            return await self.repo.update_keys(existing.id, p256dh, auth)
        subscription = await self.repo.create(
            PushSubscription.create(user_id=user_id, endpoint=endpoint, p256dh=p256dh, auth=auth)
        )
        logger.info("New push subscription %s for user %s", subscription.id, user_id)
        return subscription

    async def unsubscribe(self, user_id: str, endpoint: str) -> bool:
        """Remove a subscription. Returns False when there was nothing to remove."""
        return await self.repo.delete_by_endpoint(user_id, endpoint)

    async def list_subscriptions(self, user_id: str) -> list[PushSubscription]:
        return await self.repo.list_by_user(user_id)
