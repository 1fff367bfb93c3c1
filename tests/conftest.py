"""Test fixtures — a fresh in-memory database per test, real auth pipeline.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test gets its own SQLite in-memory engine (aiosqlite + StaticPool,
   so every session shares the one connection that holds the data).
   Foreign keys are switched on so ON DELETE CASCADE and the
   "user still owns projects" refusal behave like PostgreSQL.
2. The app's get_db is overridden to hand out a new session per request,
   just like production.
3. get_current_user is NOT overridden. Tests mint real tokens with the
   app's TokenCodec, so every request goes through the authentication
   gate, the role policy and the access resolver.
"""

import os

os.environ.setdefault("PROJECTX_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("PROJECTX_BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from projectx.auth.roles import Identity
from projectx.config import Settings
from projectx.db.engine import get_db
from projectx.db.models import Base
from projectx.main import create_app
from projectx.services.user_service import UserService

TEST_DB_URL = "sqlite+aiosqlite://"
TEST_SECRET = "test-secret-do-not-use-outside-the-test-suite"
PASSWORD = "password_123"


@pytest_asyncio.fixture()
async def engine():
    engine = create_async_engine(
        TEST_DB_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture()
async def db_session(session_factory):
    """Session for service-level tests (no HTTP)."""
    async with session_factory() as session:
        yield session


@pytest.fixture()
def app(session_factory):
    app = create_app(
        Settings(
            database_url=TEST_DB_URL,
            jwt_secret=TEST_SECRET,
            bcrypt_rounds=4,
        )
    )

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def codec(app):
    return app.state.token_codec


@pytest.fixture()
def make_user(session_factory):
    """Factory: create a user with any role directly through the service."""
    counter = {"n": 0}

    async def _make(role: str = "user", name: str | None = None):
        counter["n"] += 1
        name = name or f"{role}-{counter['n']}"
        async with session_factory() as session:
            return await UserService(session).create_user(
                name=name,
                email=f"{name}@example.com",
                password=PASSWORD,
                role=role,
            )

    return _make


@pytest.fixture()
def auth(codec):
    """Build Authorization headers for a user."""

    def _headers(user) -> dict:
        token = codec.issue(Identity(id=user.id, email=user.email, role=user.role))
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest_asyncio.fixture()
async def people(make_user):
    """The usual cast: a manager who owns things, a participant, an outsider,
    a teamlead and an admin."""
    return {
        "owner": await make_user("manager", "owner"),
        "member": await make_user("user", "member"),
        "outsider": await make_user("user", "outsider"),
        "lead": await make_user("teamlead", "lead"),
        "admin": await make_user("admin", "admin"),
    }


@pytest_asyncio.fixture()
async def project(client, auth, people):
    """A project owned by `owner`, with `member` as participant."""
    r = await client.post(
        "/api/v1/projects",
        json={"name": "Apollo", "description": "Moonshot"},
        headers=auth(people["owner"]),
    )
    assert r.status_code == 201
    proj = r.json()

    r = await client.post(
        f"/api/v1/projects/{proj['id']}/participants",
        json={"user_id": people["member"].id},
        headers=auth(people["owner"]),
    )
    assert r.status_code == 201
    return proj


@pytest_asyncio.fixture()
async def task(client, auth, people, project):
    r = await client.post(
        "/api/v1/tasks",
        json={"title": "Build rocket", "project_id": project["id"]},
        headers=auth(people["owner"]),
    )
    assert r.status_code == 201
    return r.json()
