"""Pytest configuration and fixtures for OfficeXpress tests.

API tests run against an in-memory SQLite database (aiosqlite) that
replaces the `get_db` dependency; no PostgreSQL server is needed.
"""

import os

# Must be set before officexpress.config is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite://")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from officexpress.auth.jwt import create_access_token
from officexpress.auth.password import hash_password
from officexpress.database import Base, get_db
from officexpress.main import app
from officexpress.models.user import User, UserRole

TEST_PASSWORD = "testpassword123"


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the database dependency pointed at the test session."""

    async def override_get_db():
        yield db_session
        await db_session.commit()

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

async def _make_user(db: AsyncSession, **fields) -> User:
    fields.setdefault("hashed_password", hash_password(TEST_PASSWORD))
    user = User(**fields)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def superadmin(db_session: AsyncSession) -> User:
    return await _make_user(
        db_session,
        phone="+8801700000001",
        name="Root Admin",
        role=UserRole.SUPERADMIN,
    )


@pytest_asyncio.fixture
async def employee(db_session: AsyncSession) -> User:
    """Employee who can view and export rental bookings and assign drivers."""
    return await _make_user(
        db_session,
        phone="+8801700000002",
        name="Ops Employee",
        role=UserRole.EMPLOYEE,
        permissions={
            "rentalBookings": {"view": True, "edit": False, "downloadCsv": True},
            "driverAssignment": True,
        },
    )


@pytest_asyncio.fixture
async def customer(db_session: AsyncSession) -> User:
    return await _make_user(
        db_session,
        phone="+8801700000003",
        name="Regular Customer",
        role=UserRole.CUSTOMER,
    )


def auth_headers_for(user: User) -> dict:
    token = create_access_token(user_id=user.id, role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def superadmin_headers(superadmin: User) -> dict:
    return auth_headers_for(superadmin)


@pytest.fixture
def employee_headers(employee: User) -> dict:
    return auth_headers_for(employee)


@pytest.fixture
def customer_headers(customer: User) -> dict:
    return auth_headers_for(customer)


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: HTTP API tests")
    config.addinivalue_line("markers", "auth: Authentication tests")
    config.addinivalue_line("markers", "permissions: Permission checks and guards")
