"""Plant routes."""
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from plantcare.api.deps import get_current_user, get_plant_service
from plantcare.domain.plants.models import DuePlant, Plant, PlantDetails, PlantOverview, UpcomingPlant
from plantcare.domain.plants.services import PlantService
from plantcare.domain.users.models import User
from plantcare.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()

IMAGE_URL_PATTERN = r"^(https?://.*|data:image/(jpeg|jpg|png|gif|webp);base64,.*)$"


class PlantCreateRequest(BaseModel):
    """Create plant request."""
    name: str = Field(min_length=1)
    species: Optional[str] = None
    purchase_date: Optional[date] = None
    image_url: Optional[str] = Field(default=None, pattern=IMAGE_URL_PATTERN)
    notes: Optional[str] = None
    location: Optional[str] = None
    water_amount_ml: int = Field(ge=1)
    water_frequency_days: int = Field(ge=1)


class PlantUpdateRequest(BaseModel):
    """Update plant request; omitted fields are left unchanged."""
    name: Optional[str] = Field(default=None, min_length=1)
    species: Optional[str] = None
    purchase_date: Optional[date] = None
    image_url: Optional[str] = Field(default=None, pattern=IMAGE_URL_PATTERN)
    notes: Optional[str] = None
    location: Optional[str] = None
    water_amount_ml: Optional[int] = Field(default=None, ge=1)
    water_frequency_days: Optional[int] = Field(default=None, ge=1)


@router.post("", response_model=Plant, status_code=201)
async def create_plant(
    request: PlantCreateRequest,
    current_user: User = Depends(get_current_user),
    service: PlantService = Depends(get_plant_service),
):
    """Create a plant; it is first due one watering period from now."""
    return await service.create_plant(current_user.id, **request.model_dump())


@router.get("", response_model=list[PlantOverview])
async def list_plants(
    current_user: User = Depends(get_current_user),
    service: PlantService = Depends(get_plant_service),
):
    """List the current user's plants, newest first."""
    return await service.list_plants(current_user.id)


@router.get("/needing-water", response_model=list[DuePlant])
async def get_plants_needing_water(
    current_user: User = Depends(get_current_user),
    service: PlantService = Depends(get_plant_service),
):
    """Plants whose due time has passed, most overdue first."""
    return await service.plants_needing_water(current_user.id)


@router.get("/upcoming-waterings", response_model=list[UpcomingPlant])
async def get_upcoming_waterings(
    days: Optional[int] = Query(default=None, ge=1, le=365),
    current_user: User = Depends(get_current_user),
    service: PlantService = Depends(get_plant_service),
):
    """Plants due in the next ``days`` days (default from settings)."""
    return await service.upcoming_waterings(
        current_user.id, days=days or settings.upcoming_window_days
    )


@router.get("/{plant_id}", response_model=PlantDetails)
async def get_plant(
    plant_id: str,
    current_user: User = Depends(get_current_user),
    service: PlantService = Depends(get_plant_service),
):
    """Get one plant with its recent waterings."""
    return await service.get_plant(plant_id, current_user.id)


@router.patch("/{plant_id}", response_model=Plant)
async def update_plant(
    plant_id: str,
    request: PlantUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: PlantService = Depends(get_plant_service),
):
    """Update a plant. Changing the frequency recomputes the next watering."""
    return await service.update_plant(
        plant_id, current_user.id, **request.model_dump(exclude_unset=True)
    )


@router.delete("/{plant_id}")
async def delete_plant(
    plant_id: str,
    current_user: User = Depends(get_current_user),
    service: PlantService = Depends(get_plant_service),
):
    """Delete a plant and its watering log."""
    await service.delete_plant(plant_id, current_user.id)
    return {"message": "Plant deleted successfully"}
