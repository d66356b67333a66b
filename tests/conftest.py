"""
Shared test fixtures for the GeoAttend test suite.

Each test gets its own SQLite file (aiosqlite + AsyncSession) so that
requests and direct service calls use independent connections.
"""

import os
import sys
from typing import AsyncGenerator, Awaitable, Callable

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from geoattend.api.v1.deps import get_db
from geoattend.core.config import settings
from geoattend.core.security import create_access_token, get_password_hash
from geoattend.db.base import Base
from geoattend.main import app
from geoattend.models.user import ROLE_EMPLOYEE, ROLE_MANAGER, User
from geoattend.services.attendance import AttendancePolicy

TEST_PASSWORD = "secret123"

# Inside / outside the default office perimeter (13.133750, 77.568028; 200 m)
OFFICE = {"latitude": 13.133750, "longitude": 77.568028}
NEAR_OFFICE = {"latitude": 13.134200, "longitude": 77.568300}  # ~58 m
FAR_FROM_OFFICE = {"latitude": 13.133750, "longitude": 77.570500}  # ~268 m


@pytest.fixture(scope="session")
def password_hash() -> str:
    """bcrypt is slow; hash the shared test password once."""
    return get_password_hash(TEST_PASSWORD)


@pytest.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh database per test; create all tables before use and drop after."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    yield factory

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries and service calls."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def policy() -> AttendancePolicy:
    return AttendancePolicy.from_settings(settings)


# ── Users ───────────────────────────────────────────────────────────
UserFactory = Callable[..., Awaitable[User]]


@pytest.fixture
def make_user(db_session: AsyncSession, password_hash: str) -> UserFactory:
    counter = {"n": 0}

    async def _make(
        role: str = ROLE_EMPLOYEE,
        manager: User | None = None,
        name: str | None = None,
    ) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"{role.title()} {counter['n']}",
            email=f"{role}{counter['n']}@example.com",
            hashed_password=password_hash,
            role=role,
            manager_id=manager.id if manager else None,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture
async def manager(make_user: UserFactory) -> User:
    return await make_user(ROLE_MANAGER, name="Maya Manager")


@pytest.fixture
async def employee(make_user: UserFactory, manager: User) -> User:
    return await make_user(ROLE_EMPLOYEE, manager=manager, name="Eli Employee")


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
