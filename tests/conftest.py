"""Shared fixtures for Taka Tracker tests."""

import datetime as dt
from decimal import Decimal

import pytest

from taka_tracker.config import TrackerSettings
from taka_tracker.models import TransactionDraft, TransactionType


TODAY = dt.date(2024, 6, 15)


class FakeHandle:
    """Stands in for an asyncio TimerHandle."""

    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Records scheduled callbacks so tests decide when time passes."""

    def __init__(self):
        self.handles = []

    def __call__(self, delay, callback):
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def fire_all(self):
        """Run every callback that has not been cancelled."""
        for handle in list(self.pending):
            handle.cancelled = True
            handle.callback()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def settings(tmp_path):
    return TrackerSettings(
        _env_file=None,
        data_dir=tmp_path,
        storage_retry_attempts=1,
    )


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def make_draft():
    """Factory for transaction drafts with sensible defaults."""
    def _make(
        amount="100",
        type="expense",
        category="food",
        payment_method="cash",
        date=TODAY,
        note="",
    ):
        return TransactionDraft(
            amount=Decimal(amount),
            type=TransactionType(type),
            category=category,
            payment_method=payment_method,
            date=date,
            note=note,
        )
    return _make
