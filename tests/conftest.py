"""Test fixtures: a fresh in-memory database per test.

Each test gets its own SQLite database (aiosqlite + StaticPool, so every
session shares the one in-memory connection). get_db is overridden to
hand out sessions bound to it; the schema is created up front and thrown
away with the engine afterwards. No server database needed.

bcrypt runs at the minimum work factor to keep the suite fast.

Learn: env vars are set before anything from coursebook is imported,
because config.settings is read once at import time.
"""

import base64
import os

os.environ.setdefault("COURSEBOOK_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("COURSEBOOK_BCRYPT_ROUNDS", "4")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from coursebook.db.engine import build_engine, create_schema, get_db
from coursebook.main import app

TEST_DB_URL = "sqlite+aiosqlite://"


def basic_auth(email: str, password: str) -> dict:
    """Authorization header for HTTP Basic credentials."""
    token = base64.b64encode(f"{email}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest_asyncio.fixture()
async def session_factory():
    engine = build_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_schema(engine)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Direct session for inspecting what the API wrote."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def client(session_factory):
    """HTTP client against the app with get_db pointed at the test database.

    Auth is NOT overridden: requests go through the real Basic-auth
    pipeline, so tests register users and send their credentials.
    """
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def register(client, **overrides) -> dict:
    """Register a user through the API; returns the payload used."""
    body = {
        "firstName": "Jo",
        "lastName": "Doe",
        "emailAddress": "jo@example.com",
        "password": "secretpw",
    }
    body.update(overrides)
    r = await client.post("/api/users", json=body)
    assert r.status_code == 201, r.text
    return body


async def create_course(client, user: dict, **overrides) -> int:
    """Create a course as ``user``; returns its id from the Location header."""
    body = {"title": "Intro", "description": "Basics"}
    body.update(overrides)
    r = await client.post(
        "/api/courses",
        json=body,
        headers=basic_auth(user["emailAddress"], user["password"]),
    )
    assert r.status_code == 201, r.text
    return int(r.headers["Location"].rsplit("/", 1)[1])


@pytest_asyncio.fixture()
async def jo(client):
    return await register(client)


@pytest_asyncio.fixture()
async def sam(client):
    return await register(
        client,
        firstName="Sam",
        lastName="Roe",
        emailAddress="sam@example.com",
        password="anotherpw",
    )
