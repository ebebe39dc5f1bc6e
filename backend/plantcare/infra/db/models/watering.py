"""Watering database model."""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from plantcare.domain.common.types import utcnow
from plantcare.domain.plants.models import PlantSummary, Watering as WateringEntity
from plantcare.infra.db.base import Base


class WateringModel(Base):
    """One watering event. user_id duplicates the plant's owner for owner-scoped queries."""

    __tablename__ = "waterings"
    __table_args__ = (Index("ix_waterings_plant_id_created_at", "plant_id", "created_at"),)

    id = Column(String, primary_key=True)
    plant_id = Column(String, ForeignKey("plants.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    amount_ml = Column(Integer, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)  # event time, may be backdated

    plant = relationship("PlantModel", backref="waterings")

    def to_entity(self, with_plant: bool = False) -> WateringEntity:
        """Convert to domain entity. ``with_plant`` needs ``plant`` eagerly loaded."""
        plant = None
        if with_plant and self.plant is not None:
            plant = PlantSummary(
                id=self.plant.id,
                name=self.plant.name,
                species=self.plant.species,
                image_url=self.plant.image_url,
                water_amount_ml=self.plant.water_amount_ml,
                water_frequency_days=self.plant.water_frequency_days,
            )
        return WateringEntity(
            id=self.id,
            plant_id=self.plant_id,
            user_id=self.user_id,
            amount_ml=self.amount_ml,
            note=self.note,
            created_at=self.created_at,
            plant=plant,
        )
