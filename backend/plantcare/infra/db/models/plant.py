"""Plant database model."""
from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from plantcare.domain.common.types import utcnow
from plantcare.domain.plants.models import Plant as PlantEntity
from plantcare.infra.db.base import Base


class PlantModel(Base):
    """Plant owned by a user. next_watering_at is derived from the watering log."""

    __tablename__ = "plants"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    species = Column(String, nullable=True)
    purchase_date = Column(Date, nullable=True)
    image_url = Column(Text, nullable=True)  # URL or base64 data URL
    notes = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    water_amount_ml = Column(Integer, nullable=False)
    water_frequency_days = Column(Integer, nullable=False)
    next_watering_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("UserModel", backref="plants")

    def to_entity(self) -> PlantEntity:
        """Convert to domain entity."""
        return PlantEntity(
            id=self.id,
            user_id=self.user_id,
            name=self.name,
            species=self.species,
            purchase_date=self.purchase_date,
            image_url=self.image_url,
            notes=self.notes,
            location=self.location,
            water_amount_ml=self.water_amount_ml,
            water_frequency_days=self.water_frequency_days,
            next_watering_at=self.next_watering_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, entity: PlantEntity) -> "PlantModel":
        """Create from domain entity."""
        return cls(**entity.model_dump())
