"""Watering API routes."""
from fastapi import APIRouter

from plantcare.api.waterings import routes_waterings

router = APIRouter()

router.include_router(routes_waterings.router, prefix="/waterings", tags=["waterings"])
