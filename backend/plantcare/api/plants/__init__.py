"""Plant API routes."""
from fastapi import APIRouter

from plantcare.api.plants import routes_plants

router = APIRouter()

router.include_router(routes_plants.router, prefix="/plants", tags=["plants"])
