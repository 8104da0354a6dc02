"""Record store: the single owner of business records.

Two interchangeable implementations exist, an in-memory map and a MongoDB
collection. Which one serves the process is decided once at startup by
:func:`select_record_store` and the result is kept on ``app.state``.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient

from bizdir.config import DatabaseConfig
from bizdir.database import connect_database
from bizdir.models.business import Business, BusinessDocument, generate_business_id
from bizdir.schemas.business import BusinessCreate

logger = logging.getLogger(__name__)


class RecordStore(ABC):
    """Persistence capability for business records.

    Every method returns copies; mutating a returned record never changes
    the stored one.
    """

    @abstractmethod
    async def list_all(self) -> list[Business]:
        """Return all records in store iteration order."""

    @abstractmethod
    async def get(self, business_id: str) -> Business | None:
        """Return one record, or None if the ID is unknown."""

    @abstractmethod
    async def create(self, data: BusinessCreate) -> Business:
        """Insert one record with a freshly generated ID."""

    @abstractmethod
    async def update(self, business_id: str, changes: dict[str, Any]) -> Business | None:
        """Apply a partial update. Fields absent from ``changes`` are untouched."""

    @abstractmethod
    async def delete(self, business_id: str) -> bool:
        """Delete a record. Returns False if the ID is unknown."""

    @abstractmethod
    async def bulk_create(self, items: Sequence[BusinessCreate]) -> list[Business]:
        """Insert several records in one call, preserving input order."""

    async def count(self) -> int:
        """Number of stored records."""
        return len(await self.list_all())


class MemoryRecordStore(RecordStore):
    """Record store backed by a dict, lost on restart."""

    def __init__(self) -> None:
        self._businesses: dict[str, Business] = {}

    async def list_all(self) -> list[Business]:
        return [b.model_copy(deep=True) for b in self._businesses.values()]

    async def get(self, business_id: str) -> Business | None:
        business = self._businesses.get(business_id)
        return business.model_copy(deep=True) if business else None

    async def create(self, data: BusinessCreate) -> Business:
        business_id = generate_business_id()
        while business_id in self._businesses:
            business_id = generate_business_id()
        business = Business(id=business_id, **data.model_dump())
        self._businesses[business_id] = business
        return business.model_copy(deep=True)

    async def update(self, business_id: str, changes: dict[str, Any]) -> Business | None:
        existing = self._businesses.get(business_id)
        if existing is None:
            return None
        changes = {k: v for k, v in changes.items() if k != "id"}
        updated = existing.model_copy(update=changes, deep=True)
        self._businesses[business_id] = updated
        return updated.model_copy(deep=True)

    async def delete(self, business_id: str) -> bool:
        return self._businesses.pop(business_id, None) is not None

    async def bulk_create(self, items: Sequence[BusinessCreate]) -> list[Business]:
        return [await self.create(item) for item in items]

    async def count(self) -> int:
        return len(self._businesses)


class DocumentRecordStore(RecordStore):
    """Record store backed by the ``businesses`` MongoDB collection.

    Requires Beanie to have been initialised with :class:`BusinessDocument`.
    """

    async def list_all(self) -> list[Business]:
        documents = await BusinessDocument.find_all().to_list()
        return [doc.to_business() for doc in documents]

    async def get(self, business_id: str) -> Business | None:
        document = await BusinessDocument.get(business_id)
        return document.to_business() if document else None

    async def create(self, data: BusinessCreate) -> Business:
        document = BusinessDocument(**data.model_dump())
        await document.insert()
        return document.to_business()

    async def update(self, business_id: str, changes: dict[str, Any]) -> Business | None:
        document = await BusinessDocument.get(business_id)
        if document is None:
            return None
        for field, value in changes.items():
            if field != "id":
                setattr(document, field, value)
        await document.save()
        return document.to_business()

    async def delete(self, business_id: str) -> bool:
        document = await BusinessDocument.get(business_id)
        if document is None:
            return False
        await document.delete()
        return True

    async def bulk_create(self, items: Sequence[BusinessCreate]) -> list[Business]:
        if not items:
            return []
        documents = [BusinessDocument(**item.model_dump()) for item in items]
        await BusinessDocument.insert_many(documents)
        return [doc.to_business() for doc in documents]

    async def count(self) -> int:
        return await BusinessDocument.find_all().count()


class StorageMode(str, Enum):
    """How the process stores records, decided at startup."""

    MEMORY = "memory"
    DATABASE = "database"
    # Database configured but unreachable: the API refuses requests
    UNAVAILABLE = "unavailable"


@dataclass
class StoreSelection:
    """Outcome of the startup storage decision."""

    mode: StorageMode
    store: RecordStore | None
    client: AsyncIOMotorClient | None = None

    @property
    def requires_auth(self) -> bool:
        """Whether API calls need an authenticated user."""
        return self.mode is StorageMode.DATABASE

    def close(self) -> None:
        """Release the database connection, if any."""
        if self.client is not None:
            self.client.close()
            self.client = None


def memory_selection() -> StoreSelection:
    """Selection for an unconfigured or disabled database."""
    return StoreSelection(mode=StorageMode.MEMORY, store=MemoryRecordStore())


async def select_record_store(config: DatabaseConfig) -> StoreSelection:
    """Pick the record store for this process.

    - No MongoDB URL, or database explicitly disabled: in-memory store.
    - MongoDB reachable: document store.
    - MongoDB configured but unreachable: no store; requests are refused.
    """
    if not config.configured:
        logger.warning("No MongoDB URL configured - using in-memory storage without authentication")
        return memory_selection()

    if config.disabled:
        logger.warning("Database explicitly disabled - using in-memory storage without authentication")
        return memory_selection()

    try:
        client, _ = await connect_database(config)
    except Exception as e:
        logger.error(
            "Database was configured but is unavailable, API requests will be refused: %s", e
        )
        return StoreSelection(mode=StorageMode.UNAVAILABLE, store=None)

    logger.info("Using MongoDB storage - authentication required")
    return StoreSelection(mode=StorageMode.DATABASE, store=DocumentRecordStore(), client=client)
