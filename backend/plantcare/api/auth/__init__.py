"""Auth API routes."""
from fastapi import APIRouter

from plantcare.api.auth import routes_auth

router = APIRouter()

router.include_router(routes_auth.router, prefix="/auth", tags=["auth"])
