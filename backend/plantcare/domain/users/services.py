"""User domain services."""
import logging
from typing import Optional, Protocol

from plantcare.domain.common.errors import ConflictError, NotFoundError
from plantcare.domain.users.models import User, UserStats

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """User repository protocol."""

    async def create(self, user: User) -> User:
        """Create a new user."""
        ...

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        ...

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        ...

    async def update_profile_fields(
        self,
        user_id: str,
        email: Optional[str] = None,
        firstname: Optional[str] = None,
        lastname: Optional[str] = None,
    ) -> Optional[User]:
        """Update profile fields that are not None."""
        ...

    async def delete(self, user_id: str) -> bool:
        """Delete user (cascades to owned rows). Returns True if a row was removed."""
        ...

    async def get_stats(self, user_id: str) -> UserStats:
        """Count plants and waterings owned by the user."""
        ...


class UserService:
    """User service."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def create_user(
        self, email: str, password_hash: str, firstname: str, lastname: Optional[str] = None
    ) -> User:
        """Create a new user. Raises ConflictError when the email is taken."""
        existing = await self.user_repo.get_by_email(email)
        if existing:
            raise ConflictError("Email already registered")
        user = User.create(
            email=email, password_hash=password_hash, firstname=firstname, lastname=lastname
        )
        return await self.user_repo.create(user)

    async def get_user(self, user_id: str) -> User:
        """Get user by ID."""
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        return await self.user_repo.get_by_email(email)

    async def update_profile(
        self,
        user_id: str,
        email: Optional[str] = None,
        firstname: Optional[str] = None,
        lastname: Optional[str] = None,
    ) -> User:
        """Update profile. Changing email to one owned by another account is a conflict."""
        if email:
            existing = await self.user_repo.get_by_email(email)
            if existing and existing.id != user_id:
                raise ConflictError("Email is already taken")
        user = await self.user_repo.update_profile_fields(
            user_id, email=email, firstname=firstname, lastname=lastname
        )
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def delete_account(self, user_id: str) -> None:
        """Delete the account and everything it owns."""
        deleted = await self.user_repo.delete(user_id)
        if not deleted:
            raise NotFoundError("User", user_id)
        logger.info("Deleted account %s", user_id)

    async def get_stats(self, user_id: str) -> UserStats:
        """Plant and watering counts for the profile page."""
        await self.get_user(user_id)
        return await self.user_repo.get_stats(user_id)
