"""User API routes."""
from fastapi import APIRouter

from plantcare.api.users import routes_users

router = APIRouter()

router.include_router(routes_users.router, prefix="/users", tags=["users"])
