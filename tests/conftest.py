"""
Test configuration and fixtures.

Every test runs against a fresh in-memory SQLite database; the Dwolla client
is an ``AsyncMock`` so no request ever leaves the process.
"""

import os
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Settings are read at import time
os.environ["CONFIG"] = str(Path(__file__).parent / "resources" / "config.yaml")

from payhub_backend.database import Base, get_db  # noqa: E402
from payhub_backend.main import app  # noqa: E402
from payhub_backend.modules.documents.storage import (  # noqa: E402
    LocalStorageClient,
    get_storage_client,
)
from payhub_backend.modules.dwolla.client import (  # noqa: E402
    DwollaClient,
    get_dwolla_client,
)
from payhub_backend.modules.tenants.crud import create_tenant  # noqa: E402


# =============================================================================
# DATABASE
# =============================================================================


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def tenant(db):
    tenant = await create_tenant(db, "Acme Staffing")
    await db.commit()
    return tenant


@pytest_asyncio.fixture
async def other_tenant(db):
    tenant = await create_tenant(db, "Globex Contracting")
    await db.commit()
    return tenant


# =============================================================================
# COLLABORATORS
# =============================================================================


@pytest.fixture
def dwolla():
    client = AsyncMock(spec=DwollaClient)
    client.webhook_secret = None
    return client


@pytest.fixture
def storage(tmp_path):
    return LocalStorageClient(tmp_path / "storage")


# =============================================================================
# API
# =============================================================================


@pytest_asyncio.fixture
async def api(session_factory, dwolla, storage):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dwolla_client] = lambda: dwolla
    app.dependency_overrides[get_storage_client] = lambda: storage

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()
