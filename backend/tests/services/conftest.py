"""Service test fixtures - async DB, seeded accounts and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine
    - seed_users creates one account per role (plus an unknown role and an
      expired session), each reachable through "token-<name>"

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
      (PostgreSQL-specific features not exercised here)
    - StaticPool: every session shares the single in-memory connection
"""

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.pool import StaticPool

from marketplace.db.base import Base
from marketplace.infrastructure.database import get_db, DatabaseSessionManager
from marketplace.models.auth_session import AuthSession
from marketplace.models.category import Category
from marketplace.models.item import Item
from marketplace.models.user import User
import marketplace.infrastructure.database as db_module
from marketplace.main import app

# name -> stored role
SEED_ROLES = {
    "admin": "ADMIN",
    "alice": "USER",
    "bob": "USER",
    "blocked": "BLOCKED",
    "stranger": "SUPERUSER",
    "expired": "USER",
}


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@pytest.fixture
async def seed_users(test_db):
    """One persisted user per entry in SEED_ROLES, keyed by name."""
    now = datetime.now(timezone.utc)
    users = {}
    for name, role in SEED_ROLES.items():
        user = User(name=name, email=f"{name}@example.com", role=role)
        test_db.add(user)
        await test_db.flush()
        expires_at = now - timedelta(hours=1) if name == "expired" else now + timedelta(days=1)
        test_db.add(AuthSession(
            session_token=f"token-{name}", user_id=user.id, expires_at=expires_at,
        ))
        users[name] = user
    await test_db.commit()
    return users


@pytest.fixture
def auth_headers():
    """auth_headers("alice") -> Authorization header for alice's session."""
    def _headers(name: str) -> dict:
        return {"Authorization": f"Bearer token-{name}"}
    return _headers


@pytest.fixture
async def alice_item(test_db, seed_users):
    item = Item(
        name="Desk Lamp", price=25.0, slug="desk-lamp",
        user_id=seed_users["alice"].id,
    )
    test_db.add(item)
    await test_db.commit()
    await test_db.refresh(item)
    return item


@pytest.fixture
async def bob_item(test_db, seed_users):
    item = Item(
        name="Bicycle", price=120.0, slug="bicycle",
        user_id=seed_users["bob"].id,
    )
    test_db.add(item)
    await test_db.commit()
    await test_db.refresh(item)
    return item


@pytest.fixture
async def admin_category(test_db, seed_users):
    category = Category(name="Furniture", user_id=seed_users["admin"].id)
    test_db.add(category)
    await test_db.commit()
    await test_db.refresh(category)
    return category
