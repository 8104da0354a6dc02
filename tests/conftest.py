"""Pytest configuration and fixtures for Bizdir tests.

Most tests run the API against the in-memory record store. Tests using
the ``mongo_*`` fixtures need a real MongoDB server at ``TEST_MONGODB_URL``
and are skipped when it cannot be reached.
"""

import csv
import io
import os
import uuid
from collections.abc import AsyncGenerator
from typing import Any

# Settings are created lazily; pin the values tests rely on before first use
os.environ.setdefault("BIZDIR_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.pop("BIZDIR_MONGODB_URL", None)

import pytest
import pytest_asyncio
from beanie import init_beanie
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from motor.motor_asyncio import AsyncIOMotorClient
from openpyxl import Workbook

from bizdir.database import get_document_models
from bizdir.main import create_app
from bizdir.models.user import User
from bizdir.services.auth import create_access_token, get_password_hash
from bizdir.services.record_store import (
    DocumentRecordStore,
    MemoryRecordStore,
    StorageMode,
    StoreSelection,
)

# MongoDB connection URL for tests (can be overridden with env var)
TEST_MONGODB_URL = os.environ.get("TEST_MONGODB_URL", "mongodb://localhost:27017")

TEST_USERNAME = "tester"
TEST_PASSWORD = "testpassword"


def make_csv(headers: list[str], rows: list[list[Any]]) -> bytes:
    """Build CSV upload content."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(headers)
    writer.writerows(rows)
    return output.getvalue().encode("utf-8")


def make_xlsx(headers: list[str], rows: list[list[Any]]) -> bytes:
    """Build XLSX upload content with a single sheet."""
    wb = Workbook()
    ws = wb.active
    ws.append(headers)
    for row in rows:
        ws.append(row)
    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()


def make_client(app: FastAPI, headers: dict | None = None) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=headers,
    )


@pytest.fixture
def sample_business() -> dict[str, Any]:
    """Request body for a valid business."""
    return {
        "name": "Bakkerij Jansen",
        "streetName": "Dorpsstraat 12",
        "zipcode": "1234 AB",
        "city": "Utrecht",
        "email": "info@jansen.nl",
        "phone": "030-1234567",
        "tags": ["bakery", "retail"],
        "comment": "Open on Sundays",
        "isActive": True,
    }


@pytest.fixture
def memory_store() -> MemoryRecordStore:
    """Fresh in-memory record store."""
    return MemoryRecordStore()


@pytest.fixture
def app(memory_store: MemoryRecordStore) -> FastAPI:
    """Application running in memory mode."""
    return create_app(StoreSelection(mode=StorageMode.MEMORY, store=memory_store))


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async test client for the in-memory application (no auth needed)."""
    async with make_client(app) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def unavailable_client() -> AsyncGenerator[AsyncClient, None]:
    """Client for an application whose configured database could not be reached."""
    app = create_app(StoreSelection(mode=StorageMode.UNAVAILABLE, store=None))
    async with make_client(app) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def database_mode_client(memory_store: MemoryRecordStore) -> AsyncGenerator[AsyncClient, None]:
    """Client for an application in database mode, without a token.

    Requests without a valid token are refused before the store or the user
    collection is touched, so no MongoDB server is needed.
    """
    app = create_app(StoreSelection(mode=StorageMode.DATABASE, store=memory_store))
    async with make_client(app) as ac:
        yield ac


# =============================================================================
# MongoDB-backed fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def mongo_client() -> AsyncGenerator[AsyncIOMotorClient, None]:
    """MongoDB client for testing; skips the test when no server answers."""
    client = AsyncIOMotorClient(
        TEST_MONGODB_URL,
        serverSelectionTimeoutMS=1000,
        uuidRepresentation="standard",
    )
    try:
        await client.admin.command("ping")
    except Exception:
        client.close()
        pytest.skip(f"MongoDB not reachable at {TEST_MONGODB_URL}")
    yield client
    client.close()


@pytest_asyncio.fixture(scope="function")
async def init_test_db(mongo_client: AsyncIOMotorClient):
    """Initialize Beanie with a unique test database, dropped afterwards."""
    db_name = f"test_bizdir_{uuid.uuid4().hex[:8]}"
    db = mongo_client[db_name]

    await init_beanie(
        database=db,
        document_models=get_document_models(),
    )
    yield db

    await mongo_client.drop_database(db_name)


@pytest.fixture
def test_password() -> str:
    """Plain text password of ``test_user``."""
    return TEST_PASSWORD


@pytest_asyncio.fixture(scope="function")
async def test_user(init_test_db) -> User:
    """Active API user stored in the test database."""
    user = User(
        username=TEST_USERNAME,
        email="tester@example.com",
        hashed_password=get_password_hash(TEST_PASSWORD),
    )
    await user.insert()
    return user


@pytest_asyncio.fixture(scope="function")
async def mongo_app(init_test_db) -> FastAPI:
    """Application in database mode backed by the test database."""
    return create_app(StoreSelection(mode=StorageMode.DATABASE, store=DocumentRecordStore()))


@pytest_asyncio.fixture(scope="function")
async def mongo_client_authed(mongo_app: FastAPI, test_user: User) -> AsyncGenerator[AsyncClient, None]:
    """Authenticated client for the database-backed application."""
    token = create_access_token(data={"sub": test_user.username})
    async with make_client(mongo_app, {"Authorization": f"Bearer {token}"}) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def mongo_client_anonymous(mongo_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client for the database-backed application."""
    async with make_client(mongo_app) as ac:
        yield ac


@pytest.fixture
def csv_file():
    """Factory building CSV upload content."""
    return make_csv


@pytest.fixture
def xlsx_file():
    """Factory building XLSX upload content."""
    return make_xlsx
