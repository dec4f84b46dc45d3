# tests/conftest.py
from __future__ import annotations

import os
import sys
import tempfile
import logging

# Point the app at a throwaway database before anything imports app.config
_TEST_DB = os.path.join(tempfile.gettempdir(), f"tickezy_test_{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ.setdefault("SECRET_KEY", "tickezy-test-secret")

import pytest
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.database import engine
from app.models import Base
from tests.helpers import create_user


@pytest.fixture(scope="session", autouse=True)
def _tests_log_to_stdout():
    root = logging.getLogger()
    if not any(isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stdout for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(os.getenv("TEST_LOG_LEVEL", "INFO").upper())


# Make anyio run on asyncio (so our async fixtures work everywhere)
@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def db(anyio_backend):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(db):
    app.dependency_overrides.clear()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def customer(db):
    return await create_user("customer@example.com", role="customer", name="Casey Customer")


@pytest.fixture
async def staff(db):
    return await create_user("staff@example.com", role="staff", name="Sam Staff")


@pytest.fixture
async def admin(db):
    return await create_user("admin@example.com", role="admin", name="Alex Admin")
