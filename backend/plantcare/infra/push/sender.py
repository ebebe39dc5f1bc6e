"""Push notification sender via Web Push (VAPID)."""
import asyncio
import json
import logging
from typing import Any, Optional

from pywebpush import WebPushException, webpush
from sqlalchemy.ext.asyncio import AsyncSession

from plantcare.domain.notifications.models import DeliveryResult, PushSubscription
from plantcare.infra.db.repositories.push_subscription_repo import PushSubscriptionRepositoryImpl
from plantcare.settings import settings

logger = logging.getLogger(__name__)


def build_payload(title: str, body: str, data: Optional[dict[str, Any]] = None) -> str:
    """JSON body the service worker shows as a notification."""
    return json.dumps(
        {
            "title": title,
            "body": body,
            "icon": settings.push_icon,
            "badge": settings.push_badge,
            "data": data or {},
        }
    )


def _send_one(subscription: PushSubscription, payload: str) -> DeliveryResult:
    """Blocking send of one payload (runs in a worker thread)."""
    try:
        webpush(
            subscription_info={
                "endpoint": subscription.endpoint,
                "keys": {"p256dh": subscription.p256dh, "auth": subscription.auth},
            },
            data=payload,
            vapid_private_key=settings.vapid_private_key,
            vapid_claims={"sub": settings.vapid_subject},
            ttl=settings.push_ttl_seconds,
            timeout=settings.push_timeout_seconds,
        )
    except WebPushException as e:
        status_code = e.response.status_code if e.response is not None else None
        return DeliveryResult(
            subscription_id=subscription.id,
            endpoint=subscription.endpoint,
            ok=False,
            status_code=status_code,
            error=str(e),
        )
    except Exception as e:
        return DeliveryResult(
            subscription_id=subscription.id,
            endpoint=subscription.endpoint,
            ok=False,
            error=str(e),
        )
    return DeliveryResult(subscription_id=subscription.id, endpoint=subscription.endpoint, ok=True)


class WebPushDispatcher:
    """Sends to every subscription of a user and deletes the ones the push service reports gone."""

    def __init__(self, session: AsyncSession):
        self.repo = PushSubscriptionRepositoryImpl(session)

    async def send_to_user(
        self, user_id: str, title: str, body: str, data: Optional[dict[str, Any]] = None
    ) -> list[DeliveryResult]:
        if not settings.push_enabled:
            logger.warning("VAPID keys not configured; push to user %s skipped", user_id)
            return []
        subscriptions = await self.repo.list_by_user(user_id)
        if not subscriptions:
            logger.info("No push subscriptions found for user %s", user_id)
            return []

        payload = build_payload(title, body, data)
        # Independent endpoints: one slow or failing push does not hold up the others
        results = await asyncio.gather(
            *(asyncio.to_thread(_send_one, s, payload) for s in subscriptions)
        )

        for result in results:
            if result.ok:
                logger.info("Notification sent to user %s", user_id)
                continue
            logger.warning(
                "Push send failed for user %s endpoint %s...: %s",
                user_id,
                result.endpoint[:40],
                result.error,
            )
            if result.gone:
                result.pruned = await self.repo.delete(result.subscription_id)
                logger.info("Removed invalid subscription %s for user %s", result.subscription_id, user_id)
        return list(results)


async def send_push_to_user(
    session: AsyncSession,
    user_id: str,
    title: str,
    body: str,
    data: Optional[dict[str, Any]] = None,
) -> list[DeliveryResult]:
    """Send a push notification to all subscriptions of the user."""
    return await WebPushDispatcher(session).send_to_user(user_id, title, body, data)
