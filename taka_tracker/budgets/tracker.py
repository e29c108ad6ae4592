"""
Budget Tracker

Owns the per-category monthly spending limits and measures the current
month's spending against them using the ledger.
"""

import datetime as dt
from decimal import Decimal
from typing import Any, Iterable, Optional

from taka_tracker.ledger import Ledger
from taka_tracker.models.budget import BudgetProgress, CategoryBudget
from taka_tracker.models.results import ValidationIssue
from taka_tracker.models.transaction import Period
from taka_tracker.validation import validate_budget_fields


class BudgetValidationError(Exception):
    """A budget was rejected; existing budgets are unchanged."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues) or "Invalid budget")


class BudgetTracker:
    """
    At most one budget per category, kept in creation order.

    Replacing a budget keeps its position in the list.
    """

    def __init__(self, budgets: Optional[Iterable[CategoryBudget]] = None):
        self._budgets: list[CategoryBudget] = []
        for budget in budgets or []:
            self._put(budget)

    def _put(self, budget: CategoryBudget) -> None:
        for index, existing in enumerate(self._budgets):
            if existing.category == budget.category:
                self._budgets[index] = budget
                return
        self._budgets.append(budget)

    def upsert(self, category: Any, limit: Any) -> CategoryBudget:
        """
        Create or replace the budget for a category.

        Raises:
            BudgetValidationError: category missing or limit not a positive
                number. Nothing changes.
        """
        budget, result = validate_budget_fields(category, limit)
        if budget is None:
            raise BudgetValidationError(result.errors)
        self._put(budget)
        return budget

    def remove(self, category: str) -> bool:
        """Delete the budget for a category. Unknown categories are ignored."""
        for index, existing in enumerate(self._budgets):
            if existing.category == category:
                del self._budgets[index]
                return True
        return False

    def get(self, category: str) -> Optional[CategoryBudget]:
        for budget in self._budgets:
            if budget.category == category:
                return budget
        return None

    @property
    def budgets(self) -> tuple[CategoryBudget, ...]:
        return tuple(self._budgets)

    def __len__(self) -> int:
        return len(self._budgets)

    @staticmethod
    def spent_this_month(category: str, ledger: Ledger, reference: dt.date) -> Decimal:
        """Expenses in a category during the reference day's calendar month."""
        return ledger.expenses_for(category, Period.MONTHLY, reference)

    def progress(self, category: str, ledger: Ledger, reference: dt.date) -> Optional[BudgetProgress]:
        """
        Share of a budget spent this month.

        Returns:
            BudgetProgress with percent clamped to [0, 100], or None when
            the category has no budget.
        """
        budget = self.get(category)
        if budget is None:
            return None
        return _progress_for(budget, self.spent_this_month(category, ledger, reference))

    def progress_all(self, ledger: Ledger, reference: dt.date) -> list[BudgetProgress]:
        """Progress for every budget, in budget order."""
        return [
            _progress_for(budget, self.spent_this_month(budget.category, ledger, reference))
            for budget in self._budgets
        ]


def _progress_for(budget: CategoryBudget, spent: Decimal) -> BudgetProgress:
    # limit > 0 is guaranteed by CategoryBudget
    ratio = spent / budget.limit
    return BudgetProgress(
        category=budget.category,
        limit=budget.limit,
        spent=spent,
        percent=float(min(Decimal("100"), ratio * 100)),
        ratio=float(ratio),
    )
