"""User routes."""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from plantcare.api.deps import get_current_user, get_db
from plantcare.domain.users.models import User, UserStats
from plantcare.domain.users.services import UserService
from plantcare.infra.db.repositories.user_repo import UserRepositoryImpl

router = APIRouter()


class ProfileResponse(BaseModel):
    """Profile response model (never exposes the password hash)."""
    id: str
    email: str
    firstname: str
    lastname: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, user: User) -> "ProfileResponse":
        return cls(**user.model_dump(exclude={"password_hash"}))


class UpdateProfileRequest(BaseModel):
    """Update profile request."""
    email: Optional[EmailStr] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get current user's profile."""
    return ProfileResponse.from_entity(current_user)


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    request: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update profile fields. Taking another account's email is a 409."""
    user_service = UserService(UserRepositoryImpl(db))
    user = await user_service.update_profile(
        current_user.id,
        email=request.email,
        firstname=request.firstname,
        lastname=request.lastname,
    )
    return ProfileResponse.from_entity(user)


@router.get("/stats", response_model=UserStats)
async def get_user_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Total plants and waterings of the current user."""
    return await UserService(UserRepositoryImpl(db)).get_stats(current_user.id)


@router.delete("/account")
async def delete_account(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete the account with all plants, waterings and subscriptions."""
    await UserService(UserRepositoryImpl(db)).delete_account(current_user.id)
    return {"message": "Account deleted successfully"}
