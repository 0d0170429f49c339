"""
Test fixtures

Tests run against a throwaway sqlite database (aiosqlite) with Redis
disabled. Environment is set before any netatrack import so Settings
picks it up.
"""
import asyncio
import os
import tempfile
from typing import AsyncGenerator, Dict, Optional

_TEST_DIR = tempfile.mkdtemp(prefix="netatrack-tests-")

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/netatrack.db"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["CACHE_ENABLED"] = "false"
os.environ["SENTRY_DSN"] = ""
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_EMAILS"] = "admin@netatrack.test"

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from netatrack.core.context import RequestContext
from netatrack.core.database import Base, async_session_maker, engine
from netatrack.core.security import create_access_token
import netatrack.models  # noqa: F401  registers every table on Base.metadata
from netatrack.models import Profile

ADMIN_EMAIL = "admin@netatrack.test"


async def _reset_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture(autouse=True)
def clean_database():
    """Fresh tables for every test."""
    asyncio.run(_reset_schema())
    yield


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as c:
        yield c


# --------------- callers ---------------

def make_token(user_id: str, email: str, name: Optional[str] = None) -> str:
    return create_access_token({"sub": user_id, "email": email, "user_metadata": {"full_name": name}})


def bearer(user_id: str, email: str, name: Optional[str] = None) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, email, name)}"}


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return bearer("admin-1", ADMIN_EMAIL, "Site Admin")


@pytest.fixture
def user_headers() -> Dict[str, str]:
    return bearer("user-1", "citizen@example.com", "Sita Sharma")


@pytest.fixture
def other_user_headers() -> Dict[str, str]:
    return bearer("user-2", "other@example.com", "Ram Thapa")


@pytest_asyncio.fixture
async def admin_ctx(db_session) -> RequestContext:
    db_session.add(Profile(id="admin-1", email=ADMIN_EMAIL, full_name="Site Admin", is_admin=True))
    await db_session.commit()
    return RequestContext(user_id="admin-1", email=ADMIN_EMAIL, name="Site Admin", is_admin=True)


@pytest_asyncio.fixture
async def user_ctx(db_session) -> RequestContext:
    db_session.add(Profile(id="user-1", email="citizen@example.com", full_name="Sita Sharma"))
    await db_session.commit()
    return RequestContext(user_id="user-1", email="citizen@example.com", name="Sita Sharma")


@pytest_asyncio.fixture
async def other_ctx(db_session) -> RequestContext:
    db_session.add(Profile(id="user-2", email="other@example.com", full_name="Ram Thapa"))
    await db_session.commit()
    return RequestContext(user_id="user-2", email="other@example.com", name="Ram Thapa")
