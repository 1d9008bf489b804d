"""Test configuration and fixtures.

Test setup runs every test against its own in-memory SQLite database:
1. Required settings are provided through environment variables before the app is imported
2. Each test gets a fresh engine and schema (sqlite+aiosqlite, StaticPool)
3. The app's session dependency is overridden with the test session
4. Routers may commit freely, the database disappears with the engine
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ACCESS_TOKEN_SECRET_KEY", "test-access-secret-0123456789abcdefghijklmnop")
os.environ.setdefault("REFRESH_TOKEN_SECRET_KEY", "test-refresh-secret-0123456789abcdefghijklmno")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["CORS_ALLOW_ORIGINS"] = "http://localhost:3000,http://localhost:3001"
os.environ["LOG_FORMAT"] = "console"

from collections.abc import AsyncGenerator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.database.base import Base  # noqa: E402
from src.database.dependencies import get_db_session  # noqa: E402
from src.features.user.models import User  # noqa: E402
from src.main import app  # noqa: E402

DEFAULT_PASSWORD = "crimpy2024"


# Database Setup - Function Scope (Fresh Schema Per Test)


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory database with the current schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # One shared connection, otherwise every checkout sees an empty database
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Create a database session per test.

    The same session serves the test body and every request made through
    ``client``, so rows created by fixtures are visible to the endpoints.
    """
    async_session = AsyncSession(bind=db_engine, expire_on_commit=False)
    try:
        yield async_session
    finally:
        await async_session.close()


# Mock Database Initialization


@pytest.fixture(autouse=True)
def mock_db_initialization(monkeypatch):
    """Mock init_db and close_db so lifespan doesn't interfere with tests."""

    async def mock_init_db():
        pass

    async def mock_close_db():
        pass

    monkeypatch.setattr("src.main.init_db", mock_init_db)
    monkeypatch.setattr("src.main.close_db", mock_close_db)


# FastAPI Client & Dependency Overrides


@pytest_asyncio.fixture(autouse=True)
async def override_get_db_session(session: AsyncSession):
    """Override the database session dependency with test session.

    Mirrors ``get_session``: a request that raises rolls its writes back.
    """

    async def _get_test_session():
        try:
            yield session
        except Exception:
            await session.rollback()
            raise

    app.dependency_overrides[get_db_session] = _get_test_session
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP test client.

    The client keeps cookies between requests like a browser would, so a
    login followed by other calls behaves as in production.
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"User-Agent": "crux-tests/1.0"},
    ) as ac:
        yield ac


# Test User Factories


@pytest_asyncio.fixture
async def make_user(session: AsyncSession):
    """Factory fixture to create test users with custom fields.

    Usage:
        user = await make_user()                                  # defaults
        user = await make_user(username="alex", password="s3cret1")
    """
    counter = 0  # Counter for unique email/username generation

    async def _factory(
        email=None,
        username=None,
        password=DEFAULT_PASSWORD,
        first_name="Test",
        last_name="Climber",
        **kwargs,
    ) -> User:
        nonlocal counter
        counter += 1

        if email is None:
            email = f"climber{counter}@example.com"
        if username is None:
            username = f"climber{counter}"

        user = User(
            email=email,
            username=username,
            hashed_password=User.hash_password(password),
            first_name=first_name,
            last_name=last_name,
            **kwargs,
        )

        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    yield _factory


@pytest_asyncio.fixture
async def login(client: AsyncClient):
    """Log in through the API; the client keeps the resulting cookies.

    Usage:
        response = await login(user)                 # by username
        response = await login(user, by="email")
    """

    async def _login(user: User, password: str = DEFAULT_PASSWORD, by: str = "username"):
        payload = {by: getattr(user, by), "password": password}
        return await client.post("/login", json=payload)

    return _login


@pytest_asyncio.fixture
async def auth_client(client: AsyncClient, make_user, login):
    """Client logged in as a fresh user through the real login endpoint.

    Returns:
        tuple: (client, user) - both the HTTP client and the authenticated user

    """
    user = await make_user()
    response = await login(user)
    assert response.status_code == 200
    yield client, user
