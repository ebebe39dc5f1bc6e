"""Push subscription database model."""
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from plantcare.domain.common.types import utcnow
from plantcare.domain.notifications.models import PushSubscription
from plantcare.infra.db.base import Base


class PushSubscriptionModel(Base):
    """Web Push subscription of a browser."""

    __tablename__ = "push_subscriptions"
    __table_args__ = (UniqueConstraint("user_id", "endpoint", name="uq_push_subscriptions_user_endpoint"),)

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    endpoint = Column(Text, nullable=False)
    p256dh = Column(String, nullable=False)
    auth = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("UserModel", backref="push_subscriptions")

    def to_entity(self) -> PushSubscription:
        """Convert to domain entity."""
        return PushSubscription(
            id=self.id,
            user_id=self.user_id,
            endpoint=self.endpoint,
            p256dh=self.p256dh,
            auth=self.auth,
            created_at=self.created_at,
        )
