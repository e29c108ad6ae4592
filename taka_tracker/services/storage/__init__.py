"""
Storage Services Package

Provides the abstract key-value store, its implementations (local JSON
files, in-memory) and the codec that turns models into stored text.
"""

from taka_tracker.services.storage.interface import (
    CorruptDataError,
    PersistentStore,
    StorageError,
    StorageReadError,
    StorageWriteError,
    StoreKey,
)
from taka_tracker.services.storage.json_file import JsonFileStore
from taka_tracker.services.storage.memory import InMemoryStore

__all__ = [
    # Interface
    "PersistentStore",
    "StoreKey",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryStore",
    "JsonFileStore",
]
