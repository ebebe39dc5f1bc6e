"""User database model."""
from sqlalchemy import Column, String, DateTime

from plantcare.domain.common.types import utcnow
from plantcare.domain.users.models import User as UserEntity
from plantcare.infra.db.base import Base


class UserModel(Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    firstname = Column(String, nullable=False)
    lastname = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_entity(self) -> UserEntity:
        """Convert to domain entity."""
        return UserEntity(
            id=self.id,
            email=self.email,
            password_hash=self.password_hash,
            firstname=self.firstname,
            lastname=self.lastname,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_entity(cls, entity: UserEntity) -> "UserModel":
        """Create from domain entity."""
        return cls(
            id=entity.id,
            email=entity.email,
            password_hash=entity.password_hash,
            firstname=entity.firstname,
            lastname=entity.lastname,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
