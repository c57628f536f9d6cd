"""
Centralized Test Configuration.
"""

from typing import Optional

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import Pool, StaticPool
from redis.exceptions import ConnectionError as RedisConnectionError

from pantabilen.app.main import app
from pantabilen.app.db.session import get_db, Base
from pantabilen.app.core.jwt import create_access_token
from pantabilen.app.core.redis_client import get_redis
import pantabilen.app.core.redis_client as redis_client_module
from pantabilen.app.models.enums import UserRole
from pantabilen.app.models.tenant import Tenant
from pantabilen.app.models.postal_code import PostalCode
from pantabilen.app.models.driver import Driver

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)).lower():
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


class MockRedis:
    """
    In-memory stand-in for the redis.asyncio client.
    
    Set `down = True` to make every call fail like an unreachable server.
    """
    
    def __init__(self):
        self.store = {}
        self.expiry = {}
        self.down = False
    
    def _check(self):
        if self.down:
            raise RedisConnectionError("Redis is down")
    
    async def ping(self):
        self._check()
        return True
    
    async def get(self, key):
        self._check()
        return self.store.get(key)
    
    async def set(self, key, value, ex=None):
        self._check()
        self.store[key] = value
        self.expiry[key] = ex
        return True
    
    async def delete(self, *keys):
        self._check()
        removed = [key for key in keys if key in self.store]
        for key in removed:
            del self.store[key]
            self.expiry.pop(key, None)
        return len(removed)
    
    async def exists(self, key):
        self._check()
        return int(key in self.store)
    
    async def flushdb(self):
        self.down = False
        self.store.clear()
        self.expiry.clear()


# Redis Fixture (Session Scope)
@pytest.fixture(scope="session")
def redis_client_session():
    return MockRedis()


@pytest.fixture(scope="session", autouse=True)
def apply_overrides(redis_client_session):
    """Apply overrides once for the session."""
    original_client = redis_client_module.redis_client
    redis_client_module.redis_client = redis_client_session
    
    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    async def override_get_redis():
        return redis_client_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    yield
    
    # Restore and clear
    app.dependency_overrides = {}
    redis_client_module.redis_client = original_client


@pytest.fixture(autouse=True)
async def setup_database(redis_client_session):
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    await redis_client_session.flushdb()
    
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


def auth_headers(role: UserRole, user_id: int = 1, tenant_id: Optional[int] = None, sub: str = "admin@test.se") -> dict:
    payload = {"sub": sub, "user_id": user_id, "role": role.value}
    if tenant_id is not None:
        payload["tenant_id"] = tenant_id
    return {"Authorization": f"Bearer {create_access_token(payload)}"}


@pytest.fixture
def super_admin_headers():
    return auth_headers(UserRole.SUPER_ADMIN, user_id=99, sub="super@pantabilen.se")


@pytest.fixture
async def tenant(db_session):
    tenant = Tenant(name="Skrot Stockholm AB", country="Sweden", base_address="Industrivägen 1")
    db_session.add(tenant)
    await db_session.commit()
    await db_session.refresh(tenant)
    return tenant


@pytest.fixture
async def other_tenant(db_session):
    tenant = Tenant(name="Skrot Göteborg AB", country="Sweden")
    db_session.add(tenant)
    await db_session.commit()
    await db_session.refresh(tenant)
    return tenant


@pytest.fixture
def admin_headers(tenant):
    return auth_headers(UserRole.TENANT_ADMIN, user_id=1, tenant_id=tenant.id)


@pytest.fixture
async def postal_codes(db_session):
    """Three codes in Stockholm, two in Uppsala, one inactive."""
    codes = [
        PostalCode(postal_code="11122", city="Stockholm", region="Stockholm", country="Sweden"),
        PostalCode(postal_code="11123", city="Stockholm", region="Stockholm", country="Sweden"),
        PostalCode(postal_code="11124", city="Stockholm", region="Stockholm", country="Sweden"),
        PostalCode(postal_code="75310", city="Uppsala", region="Uppsala", country="Sweden"),
        PostalCode(postal_code="75311", city="Uppsala", region="Uppsala", country="Sweden"),
        PostalCode(postal_code="75399", city="Uppsala", region="Uppsala", country="Sweden", is_active=False),
    ]
    db_session.add_all(codes)
    await db_session.commit()
    for code in codes:
        await db_session.refresh(code)
    return codes


@pytest.fixture
async def driver(db_session, tenant):
    driver = Driver(tenant_id=tenant.id, full_name="Erik Förare", phone_number="0701234567")
    db_session.add(driver)
    await db_session.commit()
    await db_session.refresh(driver)
    return driver
