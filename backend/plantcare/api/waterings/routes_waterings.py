"""Watering routes."""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator

from plantcare.api.deps import get_current_user, get_watering_service
from plantcare.domain.common.types import to_naive_utc
from plantcare.domain.plants.models import Watering
from plantcare.domain.users.models import User
from plantcare.domain.waterings.services import WateringHistory, WateringService, WateringStats
from plantcare.settings import settings

router = APIRouter()


class WateringCreateRequest(BaseModel):
    """Record watering request. ``watered_at`` backdates the event."""
    plant_id: str
    amount_ml: int = Field(ge=1)
    note: Optional[str] = None
    watered_at: Optional[datetime] = None

    @field_validator("watered_at")
    @classmethod
    def normalize_watered_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None


@router.post("", response_model=Watering, status_code=201)
async def record_watering(
    request: WateringCreateRequest,
    current_user: User = Depends(get_current_user),
    service: WateringService = Depends(get_watering_service),
):
    """Record a watering and reschedule the plant."""
    return await service.record_watering(
        current_user.id,
        request.plant_id,
        request.amount_ml,
        note=request.note,
        watered_at=request.watered_at,
    )


@router.get("", response_model=list[Watering])
async def list_waterings(
    plant_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    service: WateringService = Depends(get_watering_service),
):
    """List the current user's waterings, newest first."""
    return await service.list_waterings(current_user.id, plant_id=plant_id)


@router.get("/stats", response_model=WateringStats)
async def get_watering_stats(
    plant_id: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    service: WateringService = Depends(get_watering_service),
):
    return await service.get_stats(current_user.id, plant_id=plant_id)


@router.get("/history", response_model=WateringHistory)
async def get_watering_history(
    days: Optional[int] = Query(default=None, ge=1, le=365),
    current_user: User = Depends(get_current_user),
    service: WateringService = Depends(get_watering_service),
):
    """Waterings of the last ``days`` days grouped per day."""
    return await service.get_history(
        current_user.id, days=days or settings.history_default_days
    )


@router.get("/plant/{plant_id}", response_model=list[Watering])
async def list_plant_waterings(
    plant_id: str,
    current_user: User = Depends(get_current_user),
    service: WateringService = Depends(get_watering_service),
):
    return await service.list_waterings(current_user.id, plant_id=plant_id)


@router.get("/{watering_id}", response_model=Watering)
async def get_watering(
    watering_id: str,
    current_user: User = Depends(get_current_user),
    service: WateringService = Depends(get_watering_service),
):
    return await service.get_watering(watering_id, current_user.id)


@router.delete("/{watering_id}")
async def delete_watering(
    watering_id: str,
    current_user: User = Depends(get_current_user),
    service: WateringService = Depends(get_watering_service),
):
    """Delete a watering; the plant's due time is recomputed."""
    await service.delete_watering(watering_id, current_user.id)
    return {"message": "Watering deleted successfully"}
