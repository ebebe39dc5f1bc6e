"""API dependencies."""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from plantcare.domain.plants.services import PlantService
from plantcare.domain.users.models import User
from plantcare.domain.users.services import UserRepository
from plantcare.domain.waterings.services import WateringService
from plantcare.infra.db.repositories.plant_repo import PlantRepositoryImpl
from plantcare.infra.db.repositories.user_repo import UserRepositoryImpl
from plantcare.infra.db.repositories.watering_repo import WateringRepositoryImpl
from plantcare.infra.db.session import get_db
from plantcare.infra.security.jwt import decode_token
from plantcare.settings import settings

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/login")

__all__ = [
    "get_db",
    "get_current_user",
    "get_plant_service",
    "get_watering_service",
]


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(token)
    if payload is None:
        raise credentials_exception

    user_id = payload.get("sub")
    token_type = payload.get("type")
    if user_id is None or token_type != "access":
        raise credentials_exception

    user_repo: UserRepository = UserRepositoryImpl(db)
    user = await user_repo.get_by_id(user_id)
    if user is None:
        raise credentials_exception

    return user


def get_plant_service(db: AsyncSession = Depends(get_db)) -> PlantService:
    """Plant service bound to the request session and the schedule timezone."""
    return PlantService(PlantRepositoryImpl(db), WateringRepositoryImpl(db), tz=settings.schedule_tz)


def get_watering_service(db: AsyncSession = Depends(get_db)) -> WateringService:
    """Watering service bound to the request session and the schedule timezone."""
    return WateringService(WateringRepositoryImpl(db), PlantRepositoryImpl(db), tz=settings.schedule_tz)
