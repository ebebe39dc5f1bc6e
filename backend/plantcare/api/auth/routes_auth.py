"""Authentication routes."""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession

from plantcare.api.deps import get_db
from plantcare.domain.users.services import UserService
from plantcare.infra.db.repositories.user_repo import UserRepositoryImpl
from plantcare.infra.security.jwt import create_access_token, create_refresh_token, decode_token
from plantcare.infra.security.password import get_password_hash, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()


class RegisterRequest(BaseModel):
    """Register request model."""
    email: EmailStr
    password: str = Field(min_length=6)
    firstname: str = Field(min_length=1)
    lastname: Optional[str] = None


class LoginRequest(BaseModel):
    """Login request model."""
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    """Refresh token request model."""
    refresh_token: str


class TokenResponse(BaseModel):
    """Token response model."""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


def _tokens_for(user_id: str) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(data={"sub": user_id}),
        refresh_token=create_refresh_token(data={"sub": user_id}),
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Register a new user. A taken email is a 409 (ConflictError)."""
    logger.info("Register request for email: %s", request.email)
    user_service = UserService(UserRepositoryImpl(db))
    user = await user_service.create_user(
        email=request.email,
        password_hash=get_password_hash(request.password),
        firstname=request.firstname,
        lastname=request.lastname,
    )
    logger.info("Registered user %s", user.id)
    return _tokens_for(user.id)


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Login user."""
    user_service = UserService(UserRepositoryImpl(db))
    user = await user_service.get_user_by_email(request.email)
    if not user or not verify_password(request.password, user.password_hash):
        logger.warning("Login failed for email: %s", request.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    logger.info("Login successful for user: %s", user.id)
    return _tokens_for(user.id)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(request: RefreshRequest):
    """Exchange a refresh token for a new token pair."""
    payload = decode_token(request.refresh_token)
    if payload is None or payload.get("type") != "refresh" or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token",
        )
    return _tokens_for(payload["sub"])
