"""Shared test fixtures — async DB, client, auth helpers, factories.

Reusable across all test modules (auth, employees, tasks, leave, etc.).
Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from grofast.auth.service import create_session, create_user
from grofast.client.backend import BackendClient
from grofast.common.constants import EmployeeRole
from grofast.config import settings
from grofast.database import Base, get_db, get_session_factory
from grofast.main import create_app

# Import ALL model modules so every table is on Base.metadata
import grofast.announcements.models  # noqa: F401
import grofast.attendance.models  # noqa: F401
import grofast.auth.models  # noqa: F401
import grofast.chat.models  # noqa: F401
import grofast.clients.models  # noqa: F401
import grofast.common.audit  # noqa: F401
import grofast.employees.models  # noqa: F401
import grofast.leave.models  # noqa: F401
import grofast.meetings.models  # noqa: F401
import grofast.tasks.models  # noqa: F401
import grofast.updates.models  # noqa: F401

from grofast.auth.models import AuthUser
from grofast.employees.models import Employee

# ── SQLite compat: compile PG-specific types ────────────────────────

from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Register PG-compatible functions for SQLite
@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() as a SQLite custom function."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)

DEFAULT_PASSWORD = "password123"


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from grofast.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def _override_session_factory() -> async_sessionmaker:
    return TestSessionFactory


# ── FastAPI test client ─────────────────────────────────────────────

def build_app():
    """A fresh app instance with the DB dependencies overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_session_factory] = _override_session_factory
    return application


@pytest.fixture
async def app():
    application = build_app()
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

async def make_employee(
    db: AsyncSession,
    *,
    name: str = "Test User",
    email: Optional[str] = None,
    role: EmployeeRole = EmployeeRole.member,
    password: str = DEFAULT_PASSWORD,
    department: Optional[str] = "Engineering",
    is_active: bool = True,
) -> Employee:
    """Insert an AuthUser plus its Employee row and commit."""
    email = email or f"user.{uuid.uuid4().hex[:8]}@grofast.app"
    user = await create_user(db, email=email, password=password)
    employee = Employee(
        id=user.id,
        name=name,
        email=user.email,
        role=role,
        department=department,
        is_active=is_active,
    )
    db.add(employee)
    await db.commit()
    return employee


async def make_auth_user(db: AsyncSession, *, email: str, password: str = DEFAULT_PASSWORD) -> AuthUser:
    """A login with no Employee profile."""
    user = await create_user(db, email=email, password=password)
    await db.commit()
    return user


async def auth_headers(db: AsyncSession, user_id: uuid.UUID) -> dict[str, str]:
    """Bearer headers backed by a real session row."""
    user = await db.get(AuthUser, user_id)
    access, _, _ = await create_session(db, user)
    await db.commit()
    return {"Authorization": f"Bearer {access}"}


@pytest.fixture
async def admin(db) -> Employee:
    return await make_employee(db, name="Asha Admin", email="admin@grofast.app", role=EmployeeRole.admin)


@pytest.fixture
async def member(db) -> Employee:
    return await make_employee(db, name="Manu Member", email="member@grofast.app")


@pytest.fixture
async def other_member(db) -> Employee:
    return await make_employee(db, name="Olga Other", email="other@grofast.app", department="Design")


@pytest.fixture
async def admin_headers(db, admin) -> dict[str, str]:
    return await auth_headers(db, admin.id)


@pytest.fixture
async def member_headers(db, member) -> dict[str, str]:
    return await auth_headers(db, member.id)


@pytest.fixture
async def other_headers(db, other_member) -> dict[str, str]:
    return await auth_headers(db, other_member.id)


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    user_id: uuid.UUID,
    *,
    expired: bool = False,
    token_type: str = "access",
) -> str:
    """A signed token with no session row; enough for the websocket check."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRY_MINUTES)
    payload = {
        "sub": str(user_id),
        "sid": str(uuid.uuid4()),
        "type": token_type,
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


# ── Client SDK ──────────────────────────────────────────────────────

@pytest.fixture
async def backend(app):
    """SDK transport wired straight to the test app."""
    client = BackendClient("http://test", "", transport=ASGITransport(app=app))
    yield client
    await client.aclose()
