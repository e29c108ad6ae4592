"""Ledger package: transaction ownership, balance and filtered views."""

from taka_tracker.ledger.ids import ClockIdGenerator, IdGenerator, SequentialIdGenerator
from taka_tracker.ledger.ledger import (
    ALL_CATEGORIES,
    Ledger,
    TransactionValidationError,
)
from taka_tracker.ledger.periods import in_period

__all__ = [
    "ALL_CATEGORIES",
    "ClockIdGenerator",
    "IdGenerator",
    "Ledger",
    "SequentialIdGenerator",
    "TransactionValidationError",
    "in_period",
]
