"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract key-value interface for storage.
This allows us to:
1. Keep snapshots in local JSON files on the device
2. Use in-memory storage for testing
3. Keep ledger and budget logic decoupled from storage implementation

The interface is intentionally tiny: load a raw value, save a raw value.
Values are text (JSON for collections, plain strings for scalars), and every
save replaces the whole value for its key. There are no partial updates.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional


class StoreKey(str, Enum):
    """Every key the tracker reads or writes."""
    TRANSACTIONS = "tracker_transactions"
    BUDGETS = "tracker_budgets"
    LANGUAGE = "tracker_lang"
    THEME = "tracker_theme"
    CURRENCY = "tracker_currency"
    PIN = "tracker_pin"
    NOTIFICATIONS = "tracker_notifications"

    @property
    def holds_json(self) -> bool:
        """Collections and nested settings are JSON; the rest are plain strings."""
        return self in (StoreKey.TRANSACTIONS, StoreKey.BUDGETS, StoreKey.NOTIFICATIONS)


class PersistentStore(ABC):
    """
    Abstract interface for durable key-value storage.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    async def load(self, key: StoreKey) -> Optional[str]:
        """
        Load the raw value stored under a key.

        Args:
            key: The key to read

        Returns:
            The stored text, or None if the key was never written.
            A missing key is not an error; callers fall back to defaults.

        Raises:
            StorageReadError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def save(self, key: StoreKey, raw: str) -> bool:
        """
        Replace the value stored under a key.

        Args:
            key: The key to write
            raw: The complete new value

        Returns:
            True if saved successfully

        Raises:
            StorageWriteError: If the write fails. The previous value
                               must still be readable afterwards.
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Could not read from the storage backend."""
    pass


class StorageWriteError(StorageError):
    """Could not write to the storage backend."""
    pass


class CorruptDataError(StorageError):
    """A stored value exists but cannot be decoded."""

    def __init__(self, key: StoreKey, reason: str):
        self.key = key
        super().__init__(f"Stored value for {key.value} is unreadable: {reason}")
