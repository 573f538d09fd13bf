"""
Centralized Test Configuration.
"""

import pytest
from datetime import datetime, timedelta
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.db.session import get_db, Base
from backend.app.core.jwt import create_principal_token
from backend.app.models.enums import UserRole
from backend.app.models.master import Master
from backend.app.models.order import Order
from backend.app.models.order_enums import OrderStatus
import backend.app.core.redis_client as redis_client_module

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# Mock Redis for reliability in CI/CD
class MockRedis:
    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        return True

    async def delete(self, key):
        if key in self.store:
            del self.store[key]
            return 1
        return 0

    async def flushdb(self):
        self.store = {}

    async def aclose(self):
        self.store = {}


@pytest.fixture
def mock_redis():
    return MockRedis()


@pytest.fixture(autouse=True)
def apply_overrides(mock_redis):
    """Point the app at the in-memory database and fake Redis."""
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = mock_redis

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield

    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


@pytest.fixture
def session_factory():
    """Factory for extra sessions on the same test database (concurrent writers)."""
    return TestingSessionLocal


@pytest.fixture
def admin_headers():
    token = create_principal_token(1, "admin", UserRole.ADMIN.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def director_headers():
    """Director scoped to Moscow only."""
    token = create_principal_token(2, "director_msk", UserRole.DIRECTOR.value, ["Moscow"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def master(db_session):
    ivan = Master(name="Ivan Petrov", cities=["Moscow", "Tver"], is_active=True)
    db_session.add(ivan)
    await db_session.commit()
    return ivan


@pytest.fixture
def make_order(db_session):
    """Factory inserting an order row directly (bypasses the service)."""
    async def _make(**overrides):
        now = datetime(2026, 10, 1, 12, 0, 0)
        values = dict(
            city="Moscow",
            phone="+79990000000",
            client_name="Client",
            address="Lenina 1",
            problem="Washing machine leaks",
            date_meeting=now + timedelta(days=1),
            status=OrderStatus.PENDING,
            version=1,
            created_at=now,
            updated_at=now,
        )
        values.update(overrides)
        order = Order(**values)
        db_session.add(order)
        await db_session.commit()
        return order
    return _make
