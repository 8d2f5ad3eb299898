import socket
import uuid
from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings
from app.models.base import Base

# Use separate test database
TEST_DATABASE_URL = settings.database_url.replace(
    settings.database_name, f"{settings.database_name}_test"
)

# Test user ID (consistent across tests for predictable auth)
TEST_USER_ID = uuid.UUID("00000000-0000-0000-0000-000000000001")

# Second user for cross-user tests
USER_B_ID = uuid.UUID("00000000-0000-0000-0000-000000000099")

# Security: This is a test-only secret. Production uses a real secret from env.
TEST_AUTH_SECRET = "test-secret-key-that-is-at-least-32-characters-long"  # nosec B105  # gitleaks:allow

# Placeholder hash; tests never verify passwords against stored users.
_FAKE_PASSWORD_HASH = "$2b$12$" + "x" * 53  # nosec B105


def create_test_jwt(
    user_id: uuid.UUID = TEST_USER_ID,
    *,
    secret: str = TEST_AUTH_SECRET,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT for test authentication.

    Args:
        user_id: User UUID to encode in the sub claim.
        secret: Signing secret (must match settings.auth_secret in tests).
        expires_delta: Time until expiration. Defaults to 1 hour.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "aud": settings.auth_audience,
        "iss": settings.auth_issuer,
        "exp": now + (expires_delta or timedelta(hours=1)),
        "iat": now,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def _is_postgres_available() -> bool:
    """Check if PostgreSQL is accepting connections.

    Returns:
        True if PostgreSQL is reachable on port 5432, False otherwise.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("127.0.0.1", 5432))
        sock.close()
        return result == 0
    except OSError:
        return False


# Check once at module load time
_POSTGRES_AVAILABLE = _is_postgres_available()


def skip_if_no_postgres() -> None:
    """Skip test if PostgreSQL is not available.

    Called by fixtures that require database connection.
    """
    if not _POSTGRES_AVAILABLE:
        pytest.skip(
            "PostgreSQL not available on port 5432. "
            "Start database with: docker compose up -d"
        )


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine.

    Skips test if PostgreSQL is not available (e.g., Docker not running).
    """
    skip_if_no_postgres()

    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.exec_driver_sql("CREATE EXTENSION IF NOT EXISTS pgcrypto")
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


# =============================================================================
# Data Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession):
    """Create the Connect-tier test user in the database."""
    from app.models import User

    user = User(
        id=TEST_USER_ID,
        email="test@example.com",
        password_hash=_FAKE_PASSWORD_HASH,
        tier="connect",
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    yield user


@pytest_asyncio.fixture
async def test_profile(db_session: AsyncSession, test_user):
    """Create an empty profile (wizard step 0) for the test user."""
    from app.models import Profile

    profile = Profile(
        user_id=test_user.id,
        tier=test_user.tier,
        first_name="Test",
        last_name="User",
    )
    db_session.add(profile)
    await db_session.commit()
    await db_session.refresh(profile)
    yield profile


@pytest_asyncio.fixture
async def user_b(db_session: AsyncSession):
    """Create a Spark-tier second user with a filled-in profile."""
    from app.models import Profile, User

    user = User(
        id=USER_B_ID,
        email="userb@example.com",
        password_hash=_FAKE_PASSWORD_HASH,
        tier="spark",
    )
    db_session.add(user)
    await db_session.flush()
    profile = Profile(
        user_id=user.id,
        tier="spark",
        first_name="Bea",
        last_name="Private",
        bio="Out every weekend",
        age=29,
        city="Lisbon",
        interests=["surfing"],
        photos=["b-main.jpg"],
        tier_profile={"tier": "spark", "looking_for": "adventure_partner"},
    )
    db_session.add(profile)
    await db_session.commit()
    await db_session.refresh(user)
    await db_session.refresh(profile)
    yield user


# =============================================================================
# API Test Fixtures
# =============================================================================


def _override_db(db_engine) -> None:
    from app.core.database import get_db
    from app.main import app

    test_session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with test_session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture
async def client(
    db_engine,
    test_profile,  # noqa: ARG001 - ensures user and profile exist
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for authenticated API tests.

    Enables auth_enabled=True and injects a valid JWT for TEST_USER_ID.

    Sets up:
    - Test database connection via dependency override
    - JWT auth with test secret
    - httpx.AsyncClient with ASGI transport + auth cookie
    """
    from app.main import app

    _override_db(db_engine)

    original_auth_enabled = settings.auth_enabled
    original_auth_secret = settings.auth_secret
    settings.auth_enabled = True
    settings.auth_secret = SecretStr(TEST_AUTH_SECRET)

    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        cookies={settings.auth_cookie_name: create_test_jwt(TEST_USER_ID)},
    ) as ac:
        yield ac

    settings.auth_enabled = original_auth_enabled
    settings.auth_secret = original_auth_secret
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def unauthenticated_client(db_engine) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client without authentication.

    Auth is enabled but no JWT cookie is provided, so protected endpoints
    return 401. Registration and the tier catalogue stay reachable.
    """
    from app.main import app

    _override_db(db_engine)

    original_auth_enabled = settings.auth_enabled
    original_auth_secret = settings.auth_secret
    settings.auth_enabled = True
    settings.auth_secret = SecretStr(TEST_AUTH_SECRET)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    settings.auth_enabled = original_auth_enabled
    settings.auth_secret = original_auth_secret
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def disable_rate_limiting() -> Iterator[None]:
    """Disable rate limiting for all tests.

    Tests that exercise the limiter re-enable it explicitly.

    Yields:
        None (autouse fixture).
    """
    from app.core.rate_limiting import limiter

    original_enabled = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = original_enabled


@pytest.fixture
def wizard_settings() -> Iterator[None]:
    """Restore wizard policy settings after a test changes them."""
    original_monotonic = settings.wizard_monotonic_watermark
    original_min = settings.wizard_min_genuine_steps
    yield
    settings.wizard_monotonic_watermark = original_monotonic
    settings.wizard_min_genuine_steps = original_min
