"""API test infrastructure: async httpx client with SQLite test database."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.dialects.postgresql import UUID as PG_UUID, JSONB

from app.core.security import create_access_token, hash_password
from app.models.database import Base, get_db
from app.models.user import User, UserRole

# ---------------------------------------------------------------------------
# SQLite compatibility for PostgreSQL column types
# ---------------------------------------------------------------------------

@compiles(PG_UUID, "sqlite")
def _compile_uuid_sqlite(type_, compiler, **kw):
    return "CHAR(36)"


@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return "JSON"


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        # Enable foreign key enforcement for SQLite
        await conn.exec_driver_sql("PRAGMA foreign_keys = ON")
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


# ---------------------------------------------------------------------------
# FastAPI app with overridden dependencies
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def app(session_factory):
    from app.main import create_app

    application = create_app()

    async def _override_get_db():
        async with session_factory() as session:
            yield session

    application.dependency_overrides[get_db] = _override_get_db

    # Reset rate limiters between tests
    from app.core.rate_limit import auth_limiter, order_limiter, report_limiter
    for limiter in (auth_limiter, order_limiter, report_limiter):
        limiter.reset()

    yield application

    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------

TEST_PASSWORD = "TestPass123"
TEST_EMAIL = "test@ticketdesk.dev"
ORGANIZER_EMAIL = "organizer@ticketdesk.dev"


def bearer(tokens: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {tokens['access_token']}"}


@pytest_asyncio.fixture
async def registered_user(client: AsyncClient) -> dict:
    """Register a ticket buyer and return the token response."""
    resp = await client.post(
        "/api/v1/auth/register",
        json={"email": TEST_EMAIL, "password": TEST_PASSWORD, "full_name": "Test User"},
    )
    assert resp.status_code == 201
    return resp.json()


@pytest_asyncio.fixture
async def auth_headers(registered_user: dict) -> dict[str, str]:
    """Authorization headers for the ticket buyer."""
    return bearer(registered_user)


@pytest_asyncio.fixture
async def organizer_headers(client: AsyncClient) -> dict[str, str]:
    resp = await client.post(
        "/api/v1/auth/register/organizer",
        json={
            "email": ORGANIZER_EMAIL,
            "password": TEST_PASSWORD,
            "full_name": "Olivia Organizer",
            "organization_name": "Hall Events",
        },
    )
    assert resp.status_code == 201
    return bearer(resp.json())


@pytest_asyncio.fixture
async def admin_headers(session_factory) -> dict[str, str]:
    """Admins are not self-registered; insert one directly."""
    async with session_factory() as session:
        admin = User(
            email="admin@ticketdesk.dev",
            hashed_password=hash_password(TEST_PASSWORD),
            full_name="Admin",
            role=UserRole.ADMIN.value,
        )
        session.add(admin)
        await session.commit()
        token = create_access_token(admin.id, admin.role)
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Event helpers
# ---------------------------------------------------------------------------

def event_payload(**overrides) -> dict:
    now = datetime.now(timezone.utc)
    payload = {
        "name": "Jazz Night",
        "description": "An evening of live jazz",
        "date": (now + timedelta(days=30)).isoformat(),
        "time": "19:30",
        "location": "Dewan Filharmonik",
        "tags": ["music"],
        "ticket_types": [
            {
                "name": "VIP",
                "price": 50.0,
                "quantity": 10,
                "seat_arrangement": {"rows": 3, "columns": 4, "last_row_columns": 2},
            },
            {
                "name": "Standing",
                "price": 20.0,
                "quantity": 100,
            },
        ],
        "promotional_offers": [
            {
                "name": "Early bird",
                "code": "EARLY20",
                "discount_type": "percentage",
                "discount_value": 20,
                "valid_from": (now - timedelta(days=1)).isoformat(),
                "valid_until": (now + timedelta(days=10)).isoformat(),
            },
        ],
    }
    payload.update(overrides)
    return payload


@pytest_asyncio.fixture
async def event_payload_factory():
    """Build event creation bodies; keyword arguments replace top-level fields."""
    return event_payload


@pytest_asyncio.fixture
async def sample_event(client: AsyncClient, organizer_headers: dict) -> dict:
    """Create and return a published event with a seated and an unseated ticket type."""
    resp = await client.post("/api/v1/events/", json=event_payload(), headers=organizer_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
