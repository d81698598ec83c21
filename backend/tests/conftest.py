"""
Build API — Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── database_url:  URL of a SQLite file in the test's tmp_path
    ├── database:      Connected Database (table created), disposed afterwards
    ├── db_session:    One AsyncSession on that database
    ├── store:         AggregateStore over db_session
    ├── mock_store:    AsyncMock standing in for AggregateStore
    ├── sample_payload: the "Crushed Stone" request body
    └── test_client:   HTTPX AsyncClient wired to a fresh app over `database`
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any buildapi import so the settings singleton never points at a
# real aggregates.db in the working directory
os.environ["DATABASE_URL"] = (
    "sqlite+aiosqlite:///"
    + os.path.join(tempfile.mkdtemp(prefix="buildapi_test_"), "aggregates.db")
)
os.environ["LOG_LEVEL"] = "WARNING"

from buildapi.database import Database  # noqa: E402
from buildapi.main import create_app  # noqa: E402
from buildapi.services.aggregate_store import AggregateStore  # noqa: E402


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'aggregates.db'}"


@pytest_asyncio.fixture
async def database(database_url):
    """A connected store on a fresh file; the Aggregates table already exists."""
    db = Database(database_url)
    await db.connect()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def store(db_session):
    return AggregateStore(db_session)


@pytest.fixture
def mock_store():
    """
    AsyncMock with the AggregateStore interface.

    Usage:
        mock_store.get_by_id.return_value = None
        with pytest.raises(NotFoundError): ...
    """
    store = MagicMock(spec=AggregateStore)
    store.create_table = AsyncMock()
    store.insert = AsyncMock()
    store.list_all = AsyncMock(return_value=[])
    store.get_by_id = AsyncMock(return_value=None)
    store.update_by_id = AsyncMock(return_value=0)
    store.delete_by_id = AsyncMock(return_value=0)
    return store


@pytest.fixture
def sample_payload():
    return {
        "name": "Crushed Stone",
        "looseDensity": 1450,
        "compactedDensity": 1650,
        "category": "Base Material",
    }


@pytest.fixture
def app(database):
    return create_app(database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient talking to the app in-process.

    ASGITransport does not run the lifespan; the `database` fixture has
    already connected the store the app was built with.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
