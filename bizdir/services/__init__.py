"""Services for the Bizdir application."""

from bizdir.services.record_store import (
    DocumentRecordStore,
    MemoryRecordStore,
    RecordStore,
    StorageMode,
    StoreSelection,
    select_record_store,
)

__all__ = [
    "DocumentRecordStore",
    "MemoryRecordStore",
    "RecordStore",
    "StorageMode",
    "StoreSelection",
    "select_record_store",
]
