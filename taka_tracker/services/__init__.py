"""Services package."""

from taka_tracker.services.storage import (
    CorruptDataError,
    InMemoryStore,
    JsonFileStore,
    PersistentStore,
    StorageError,
    StorageReadError,
    StorageWriteError,
    StoreKey,
)

__all__ = [
    "CorruptDataError",
    "InMemoryStore",
    "JsonFileStore",
    "PersistentStore",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "StoreKey",
]
