"""Pytest configuration: in-memory SQLite database and an API client bound to it."""
import os
import sys
from pathlib import Path

# Must be set before plantcare.settings is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["CONFIG_FILE"] = str(Path(__file__).parent / "no-such-config.yaml")

# Add the backend directory to Python path
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from plantcare.domain.users.models import User
from plantcare.infra.db.base import Base, enable_sqlite_foreign_keys, make_sessionmaker
from plantcare.infra.db import models  # noqa: F401
from plantcare.infra.db.repositories.user_repo import UserRepositoryImpl
from plantcare.infra.security.password import get_password_hash


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests that need a real DB (deselect with '-m \"not integration\"')"
    )


@pytest.fixture
async def engine():
    """Fresh in-memory database per test, with foreign keys enforced."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_sessionmaker(engine)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


async def make_user(session, email: str = "ada@example.com", firstname: str = "Ada") -> User:
    """Insert a user directly through the repository."""
    return await UserRepositoryImpl(session).create(
        User.create(email=email, password_hash=get_password_hash("secret123"), firstname=firstname)
    )


@pytest.fixture
async def user(db_session) -> User:
    return await make_user(db_session)


@pytest.fixture
async def other_user(db_session) -> User:
    return await make_user(db_session, email="bob@example.com", firstname="Bob")


@pytest.fixture
async def client(session_factory):
    """HTTP client against the app with get_db bound to the test database."""
    from plantcare.infra.db.session import get_db
    from plantcare.main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register(client, email: str = "ada@example.com", password: str = "secret123") -> dict:
    """Register through the API and return bearer auth headers."""
    response = await client.post(
        "/v1/auth/register",
        json={"email": email, "password": password, "firstname": "Ada"},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
async def auth_headers(client) -> dict:
    return await register(client)


@pytest.fixture
def register_user(client):
    """Factory fixture: register another account and get its auth headers."""
    async def _register(email: str, password: str = "secret123") -> dict:
        return await register(client, email=email, password=password)
    return _register
