"""Database base configuration."""
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from plantcare.settings import settings


def normalize_async_url(url: str) -> str:
    """Ensure URL uses an async driver; hosting platforms often give postgresql:// (sync)."""
    u = (url or "").strip()
    if u.startswith("postgres://"):
        return u.replace("postgres://", "postgresql+asyncpg://", 1)
    if u.startswith("postgresql://"):
        return u.replace("postgresql://", "postgresql+asyncpg://", 1)
    if u.startswith("sqlite://"):
        return u.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return u


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """SQLite ignores ON DELETE CASCADE unless the pragma is set per connection."""
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


engine = create_async_engine(
    normalize_async_url(settings.database_url),
    echo=settings.database_echo,
    pool_pre_ping=True,
)
enable_sqlite_foreign_keys(engine)

AsyncSessionLocal = make_sessionmaker(engine)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# Models are imported in plantcare/main.py and alembic/env.py (models -> base would be circular)
