"""
Data Models Package

This package contains all Pydantic models used by Taka Tracker.
Everything the ledger stores, computes or returns conforms to these schemas.
"""

from taka_tracker.models.budget import BudgetProgress, CategoryBudget
from taka_tracker.models.preferences import (
    Language,
    NotificationPreferences,
    Preferences,
    Theme,
)
from taka_tracker.models.reports import (
    DistributionSlice,
    ExpenseDistribution,
    ExportRow,
    PeriodStats,
)
from taka_tracker.models.results import (
    CommandResult,
    ErrorKind,
    ValidationIssue,
    ValidationResult,
)
from taka_tracker.models.transaction import (
    Period,
    Transaction,
    TransactionDraft,
    TransactionType,
)

__all__ = [
    # Ledger models
    "Period",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    # Budget models
    "BudgetProgress",
    "CategoryBudget",
    # Preferences
    "Language",
    "NotificationPreferences",
    "Preferences",
    "Theme",
    # Reports
    "DistributionSlice",
    "ExpenseDistribution",
    "ExportRow",
    "PeriodStats",
    # Results
    "CommandResult",
    "ErrorKind",
    "ValidationIssue",
    "ValidationResult",
]
