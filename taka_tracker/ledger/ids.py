"""
Transaction Id Generation

Ids are opaque strings. The ledger takes an IdGenerator so tests can use
predictable ids while the app uses clock-derived ones.
"""

import time
from typing import Callable, Iterable, Protocol


class IdGenerator(Protocol):
    def next_id(self) -> str:
        ...

    def observe(self, existing_ids: Iterable[str]) -> None:
        ...


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class ClockIdGenerator:
    """
    Millisecond timestamp ids, strictly increasing.

    Two ids requested in the same millisecond, or after the wall clock
    stepped backwards, get the previous value plus one. Ids already in the
    ledger are observed at load time so a fresh process never hands out a
    value that is still in use.
    """

    def __init__(self, clock: Callable[[], int] = _epoch_millis):
        self._clock = clock
        self._last = 0

    def next_id(self) -> str:
        candidate = self._clock()
        if candidate <= self._last:
            candidate = self._last + 1
        self._last = candidate
        return str(candidate)

    def observe(self, existing_ids: Iterable[str]) -> None:
        for existing in existing_ids:
            if existing.isdigit():
                self._last = max(self._last, int(existing))


class SequentialIdGenerator:
    """Deterministic ids: tx-1, tx-2, ..."""

    def __init__(self, prefix: str = "tx-", start: int = 1):
        self._prefix = prefix
        self._next = start

    def next_id(self) -> str:
        value = f"{self._prefix}{self._next}"
        self._next += 1
        return value

    def observe(self, existing_ids: Iterable[str]) -> None:
        for existing in existing_ids:
            suffix = existing[len(self._prefix):] if existing.startswith(self._prefix) else ""
            if suffix.isdigit():
                self._next = max(self._next, int(suffix) + 1)
