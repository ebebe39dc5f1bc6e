"""Database models."""
from plantcare.infra.db.models.user import UserModel
from plantcare.infra.db.models.plant import PlantModel
from plantcare.infra.db.models.watering import WateringModel
from plantcare.infra.db.models.push_subscription import PushSubscriptionModel

__all__ = [
    "UserModel",
    "PlantModel",
    "WateringModel",
    "PushSubscriptionModel",
]
