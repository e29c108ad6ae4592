"""
In-Memory Storage

A dict-backed PersistentStore. Used in tests and for throwaway sessions;
nothing survives the process.
"""

from typing import Optional

from taka_tracker.services.storage.interface import (
    PersistentStore,
    StorageWriteError,
    StoreKey,
)


class InMemoryStore(PersistentStore):
    """Keeps raw values in a dict."""

    def __init__(self, initial: Optional[dict[StoreKey, str]] = None):
        self._data: dict[StoreKey, str] = dict(initial or {})
        self.save_count = 0
        # Set to make every save fail, to exercise storage error handling
        self.fail_writes = False

    async def load(self, key: StoreKey) -> Optional[str]:
        return self._data.get(key)

    async def save(self, key: StoreKey, raw: str) -> bool:
        if self.fail_writes:
            raise StorageWriteError(f"Write refused for {key.value}")
        self._data[key] = raw
        self.save_count += 1
        return True

    def snapshot(self) -> dict[StoreKey, str]:
        """Copy of everything stored, for assertions."""
        return dict(self._data)
