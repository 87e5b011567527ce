"""
Disaster Reports - test configuration and fixtures
"""
import os
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set testing environment before the app reads its settings
os.environ["DISASTER_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["DISASTER_SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["DISASTER_GEOCODING_ENABLED"] = "false"
os.environ["DISASTER_GEOCODING_BATCH_DELAY_SECONDS"] = "0"

from disaster_reports.core.config import Settings
from disaster_reports.core.dependencies import get_app_settings, get_db
from disaster_reports.db.base import Base
from disaster_reports.db.session import enable_sqlite_savepoints
from disaster_reports.main import app
from disaster_reports.models.user import User
from disaster_reports.services.users import ensure_admin

fake = Faker()

ADMIN_PASSWORD = "admin-password-123"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        secret_key="test-secret-key-for-testing-only",
        geocoding_enabled=False,
        geocoding_batch_delay_seconds=0,
        seed_sample_reports=False,
    )


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
async def client(db_session: AsyncSession, test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """Test client wired to the per-test database"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_app_settings] = lambda: test_settings

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    user = await ensure_admin(db_session, "admin", ADMIN_PASSWORD, "Admin Dev")
    await db_session.commit()
    return user


@pytest.fixture
def report_payload() -> dict:
    """Valid report submission as the web form sends it"""
    return {
        "disasterType": "banjir",
        "location": "Jakarta",
        "detailedAddress": fake.street_address(),
        "description": "Banjir besar di lokasi",
        "reporterName": fake.name(),
        "reporterPhone": "081234567890",
        "reporterEmail": "x@y.com",
        "photos": [],
    }
