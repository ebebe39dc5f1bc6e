"""Push notification API routes."""
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from plantcare.api.deps import get_current_user, get_db
from plantcare.domain.notifications.models import DeliveryResult
from plantcare.domain.notifications.services import SubscriptionService
from plantcare.domain.users.models import User
from plantcare.infra.db.repositories.push_subscription_repo import PushSubscriptionRepositoryImpl
from plantcare.infra.push.sender import send_push_to_user
from plantcare.settings import settings

router = APIRouter()


class SubscriptionKeys(BaseModel):
    p256dh: str = Field(min_length=1)
    auth: str = Field(min_length=1)


class SubscribeRequest(BaseModel):
    """Browser PushSubscription.toJSON() shape."""
    endpoint: str = Field(min_length=1)
    keys: SubscriptionKeys


class UnsubscribeRequest(BaseModel):
    endpoint: str = Field(min_length=1)


class SubscriptionResponse(BaseModel):
    """Subscription response (keys are not echoed back)."""
    id: str
    endpoint: str
    created_at: datetime


class TestNotificationResponse(BaseModel):
    sent: int
    failed: int
    results: List[DeliveryResult]


def _service(db: AsyncSession) -> SubscriptionService:
    return SubscriptionService(PushSubscriptionRepositoryImpl(db))


@router.get("/vapid-public-key")
async def get_vapid_public_key():
    """Public VAPID key the browser needs to subscribe."""
    if not settings.vapid_public_key:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Push not configured")
    return {"public_key": settings.vapid_public_key}


@router.post("/subscribe", response_model=SubscriptionResponse, status_code=201)
async def subscribe(
    request: SubscribeRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Register (or refresh the keys of) this browser's push subscription."""
    subscription = await _service(db).subscribe(
        current_user.id, request.endpoint, request.keys.p256dh, request.keys.auth
    )
    return SubscriptionResponse(**subscription.model_dump())


@router.delete("/unsubscribe")
async def unsubscribe(
    request: Optional[UnsubscribeRequest] = None,
    endpoint: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Remove a subscription. The endpoint comes from the body or the query string."""
    target = request.endpoint if request is not None else endpoint
    if not target:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="endpoint is required")
    removed = await _service(db).unsubscribe(current_user.id, target)
    message = "Unsubscribed successfully" if removed else "Subscription not found"
    return {"removed": removed, "message": message}


@router.get("/subscriptions", response_model=List[SubscriptionResponse])
async def list_subscriptions(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    subscriptions = await _service(db).list_subscriptions(current_user.id)
    return [SubscriptionResponse(**s.model_dump()) for s in subscriptions]


@router.post("/test", response_model=TestNotificationResponse)
async def send_test_notification(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Send a test push to every subscription of the current user."""
    results = await send_push_to_user(
        db,
        current_user.id,
        "🌱 PlantCare",
        "Notifications are working!",
        {"type": "test"},
    )
    sent = sum(1 for r in results if r.ok)
    return TestNotificationResponse(sent=sent, failed=len(results) - sent, results=results)
