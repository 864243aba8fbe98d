"""
Test fixtures for the Pitaka API test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test,
    with reference data (banks, billers, loan products, companies) seeded
  - client: Async HTTP test client (unauthenticated)
  - authenticated_client: Client for a pre-registered user with a JWT
  - second_authenticated_client: A second user, for cross-user tests
  - principal / second_principal: The two users as AuthenticatedPrincipal,
    for calling services directly

Key design decisions:
  - In-memory SQLite shared through StaticPool, so the test session and
    every request session see the same database.
  - FastAPI's get_db dependency is overridden to hand out sessions on the
    test engine. The override commits and rolls back exactly like the real
    one, so atomicity is tested as it runs in production.
  - ASGITransport doesn't run the app lifespan, so reference data is
    seeded by the db_engine fixture instead.
  - Users are created via the real signup endpoint.
"""

import os
import uuid

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-pitaka-tests")
os.environ.setdefault("CARD_ENCRYPTION_KEY", "t9Sqoo0w-T6KUBFp9pL5tIELZ7OkL2eGClxVvrU9Jlo=")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from pitaka import models  # noqa: F401
from pitaka.database import Base, get_db
from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.main import app
from pitaka.services.seed_service import seed_reference_data

from helpers import FIRST_USER, SECOND_USER


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables and reference data."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        await seed_reference_data(session)
        await session.commit()

    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Provide an async session bound to the test engine."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def app_with_test_db(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app_with_test_db):
    """Async HTTP test client with the test database injected."""
    async with AsyncClient(
        transport=ASGITransport(app=app_with_test_db),
        base_url="http://test",
    ) as ac:
        yield ac


async def signup(client: AsyncClient, user: dict) -> dict:
    """Sign a user up through the API and return the response's data."""
    response = await client.post("/auth/signup", json=user)
    assert response.status_code == 201, f"Signup failed: {response.text}"
    return response.json()["data"]


async def _authenticated(app_with_test_db, user: dict):
    async with AsyncClient(
        transport=ASGITransport(app=app_with_test_db),
        base_url="http://test",
    ) as ac:
        data = await signup(ac, user)
        ac.headers["Authorization"] = f"Bearer {data['token']}"
        ac.user_id = uuid.UUID(data["user_id"])
        yield ac


@pytest_asyncio.fixture
async def authenticated_client(app_with_test_db):
    """
    Test client with a pre-registered user and JWT token.

    The user's id is available as `authenticated_client.user_id`.
    """
    async for ac in _authenticated(app_with_test_db, FIRST_USER):
        yield ac


@pytest_asyncio.fixture
async def second_authenticated_client(app_with_test_db):
    """A second, independent user for cross-user authorization tests."""
    async for ac in _authenticated(app_with_test_db, SECOND_USER):
        yield ac


@pytest_asyncio.fixture
async def principal(authenticated_client):
    return AuthenticatedPrincipal(owner_id=authenticated_client.user_id)


@pytest_asyncio.fixture
async def second_principal(second_authenticated_client):
    return AuthenticatedPrincipal(owner_id=second_authenticated_client.user_id)

