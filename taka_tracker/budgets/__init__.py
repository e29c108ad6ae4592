"""Budget tracking package."""

from taka_tracker.budgets.tracker import BudgetTracker, BudgetValidationError

__all__ = ["BudgetTracker", "BudgetValidationError"]
