"""Tests for the record stores and the startup storage decision."""

import pytest

from bizdir.config import DatabaseConfig
from bizdir.schemas.business import BusinessCreate
from bizdir.services.record_store import (
    DocumentRecordStore,
    MemoryRecordStore,
    RecordStore,
    StorageMode,
    select_record_store,
)


def _data(name: str = "Shop", **overrides) -> BusinessCreate:
    fields = {
        "name": name,
        "street_name": "Main 1",
        "zipcode": "1000 AA",
        "city": "Delft",
        "tags": ["retail"],
    }
    fields.update(overrides)
    return BusinessCreate(**fields)


async def _exercise_store(store: RecordStore) -> None:
    """Behaviour every record store shares."""
    created = await store.create(_data("One"))
    assert created.id
    assert created.is_active is True

    fetched = await store.get(created.id)
    assert fetched == created

    updated = await store.update(created.id, {"city": "Gouda", "id": "ignored"})
    assert updated.id == created.id
    assert updated.city == "Gouda"
    assert updated.name == "One"

    bulk = await store.bulk_create([_data("Two"), _data("Three")])
    assert [b.name for b in bulk] == ["Two", "Three"]
    assert len({created.id, *(b.id for b in bulk)}) == 3

    assert [b.name for b in await store.list_all()] == ["One", "Two", "Three"]
    assert await store.count() == 3

    assert await store.delete(created.id) is True
    assert await store.delete(created.id) is False
    assert await store.get(created.id) is None
    assert await store.update(created.id, {"city": "x"}) is None
    assert await store.count() == 2


# =============================================================================
# Memory store
# =============================================================================


@pytest.mark.asyncio
async def test_memory_store_operations() -> None:
    await _exercise_store(MemoryRecordStore())


@pytest.mark.asyncio
async def test_memory_store_returns_copies() -> None:
    store = MemoryRecordStore()
    created = await store.create(_data())

    created.name = "Changed"
    created.tags.append("mutated")
    listed = await store.list_all()
    listed[0].city = "Elsewhere"

    stored = await store.get(created.id)
    assert stored.name == "Shop"
    assert stored.tags == ["retail"]
    assert stored.city == "Delft"


@pytest.mark.asyncio
async def test_memory_store_bulk_create_empty() -> None:
    store = MemoryRecordStore()
    assert await store.bulk_create([]) == []
    assert await store.count() == 0


# =============================================================================
# Storage selection
# =============================================================================


@pytest.mark.asyncio
async def test_select_without_url_uses_memory() -> None:
    selection = await select_record_store(DatabaseConfig())
    assert selection.mode is StorageMode.MEMORY
    assert isinstance(selection.store, MemoryRecordStore)
    assert selection.requires_auth is False


@pytest.mark.asyncio
async def test_select_disabled_database_uses_memory() -> None:
    config = DatabaseConfig(mongodb_url="mongodb://127.0.0.1:1", disabled=True)
    selection = await select_record_store(config)
    assert selection.mode is StorageMode.MEMORY


@pytest.mark.asyncio
async def test_select_unreachable_database_fails_closed() -> None:
    config = DatabaseConfig(mongodb_url="mongodb://127.0.0.1:1", server_selection_timeout_ms=200)
    selection = await select_record_store(config)
    assert selection.mode is StorageMode.UNAVAILABLE
    assert selection.store is None
    assert selection.client is None


# =============================================================================
# Document store (skipped without MongoDB)
# =============================================================================


@pytest.mark.asyncio
async def test_document_store_operations(init_test_db) -> None:
    await _exercise_store(DocumentRecordStore())


@pytest.mark.asyncio
async def test_document_store_bulk_create_empty(init_test_db) -> None:
    store = DocumentRecordStore()
    assert await store.bulk_create([]) == []
    assert await store.count() == 0
