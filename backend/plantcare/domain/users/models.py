"""User domain models."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr

from plantcare.domain.common.types import generate_id, utcnow


class User(BaseModel):
    """User domain model."""

    id: str
    email: EmailStr
    password_hash: str
    firstname: str
    lastname: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def create(
        cls, email: EmailStr, password_hash: str, firstname: str, lastname: Optional[str] = None
    ) -> "User":
        """Create a new user."""
        now = utcnow()
        return cls(
            id=generate_id(),
            email=email,
            password_hash=password_hash,
            firstname=firstname,
            lastname=lastname,
            created_at=now,
            updated_at=now,
        )


class UserStats(BaseModel):
    """Counts shown on the profile page."""

    total_plants: int
    total_waterings: int
