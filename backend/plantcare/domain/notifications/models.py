"""Push subscription domain models."""
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel

from plantcare.domain.common.types import generate_id, utcnow

# Push service answers meaning "this subscription is gone, forget it"
GONE_STATUS_CODES = frozenset({404, 410})


class PushSubscription(BaseModel):
    """Browser push subscription (Web Push endpoint + encryption keys)."""

    id: str
    user_id: str
    endpoint: str
    p256dh: str
    auth: str
    created_at: datetime

    @classmethod
    def create(cls, user_id: str, endpoint: str, p256dh: str, auth: str) -> "PushSubscription":
        """Create a new subscription."""
        return cls(
            id=generate_id(),
            user_id=user_id,
            endpoint=endpoint,
            p256dh=p256dh,
            auth=auth,
            created_at=utcnow(),
        )


class DeliveryResult(BaseModel):
    """Outcome of one push to one subscription."""

    subscription_id: str
    endpoint: str
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None
    pruned: bool = False

    @property
    def gone(self) -> bool:
        return self.status_code in GONE_STATUS_CODES


class ReminderPayload(BaseModel):
    """Title/body/metadata of one grouped reminder."""

    title: str
    body: str
    data: dict[str, Any]
