"""Plant and watering domain models."""
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel

from plantcare.domain.common.types import generate_id, utcnow


class Plant(BaseModel):
    """Plant domain model."""

    id: str
    user_id: str
    name: str
    species: Optional[str] = None
    purchase_date: Optional[date] = None
    image_url: Optional[str] = None
    notes: Optional[str] = None
    location: Optional[str] = None
    water_amount_ml: int
    water_frequency_days: int
    next_watering_at: datetime
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls,
        user_id: str,
        name: str,
        water_amount_ml: int,
        water_frequency_days: int,
        next_watering_at: datetime,
        species: Optional[str] = None,
        purchase_date: Optional[date] = None,
        image_url: Optional[str] = None,
        notes: Optional[str] = None,
        location: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> "Plant":
        """Create a new plant."""
        now = created_at or utcnow()
        return cls(
            id=generate_id(),
            user_id=user_id,
            name=name,
            species=species,
            purchase_date=purchase_date,
            image_url=image_url,
            notes=notes,
            location=location,
            water_amount_ml=water_amount_ml,
            water_frequency_days=water_frequency_days,
            next_watering_at=next_watering_at,
            created_at=now,
            updated_at=now,
        )


class PlantSummary(BaseModel):
    """The few plant fields shown next to a watering."""

    id: str
    name: str
    species: Optional[str] = None
    image_url: Optional[str] = None
    water_amount_ml: int
    water_frequency_days: int


class Watering(BaseModel):
    """One watering event. ``created_at`` is the event time and may be backdated."""

    id: str
    plant_id: str
    user_id: str
    amount_ml: int
    note: Optional[str] = None
    created_at: datetime
    plant: Optional[PlantSummary] = None

    @classmethod
    def create(
        cls,
        plant_id: str,
        user_id: str,
        amount_ml: int,
        note: Optional[str] = None,
        watered_at: Optional[datetime] = None,
    ) -> "Watering":
        """Create a new watering event (now unless backdated)."""
        return cls(
            id=generate_id(),
            plant_id=plant_id,
            user_id=user_id,
            amount_ml=amount_ml,
            note=note,
            created_at=watered_at or utcnow(),
        )


class PlantOverview(Plant):
    """Plant with its latest watering and log size (list view)."""

    last_watering: Optional[Watering] = None
    total_waterings: int = 0


class PlantDetails(Plant):
    """Plant with its most recent waterings (detail view)."""

    waterings: list[Watering] = []
    total_waterings: int = 0


class DuePlant(Plant):
    """Plant whose due time has passed."""

    last_watering: Optional[Watering] = None
    days_overdue: int


class UpcomingPlant(Plant):
    """Plant due within the look-ahead window."""

    days_until_watering: int
