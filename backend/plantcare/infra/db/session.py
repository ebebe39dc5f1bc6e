"""Database session dependency."""
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from plantcare.infra.db.base import AsyncSessionLocal


async def get_db() -> AsyncIterator[AsyncSession]:
    """Yield one session per request; rolled back if the request fails."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
