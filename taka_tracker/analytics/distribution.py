"""
Expense Distribution

Turns a list of transactions into the category breakdown behind the
circular expense chart.

The slices partition the circle exactly: each boundary is the running
Decimal total divided by the grand total, so the last slice ends at
exactly 1.0 and each slice starts where the previous one ended.
"""

from decimal import Decimal
from typing import Iterable, Optional

from taka_tracker.models.preferences import Language
from taka_tracker.models.reports import DistributionSlice, ExpenseDistribution
from taka_tracker.models.transaction import Transaction
from taka_tracker.models.vocabulary import category_label


def group_expenses(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    """Sum expense amounts per category, in order of first appearance."""
    totals: dict[str, Decimal] = {}
    for transaction in transactions:
        if not transaction.is_expense:
            continue
        totals[transaction.category] = totals.get(transaction.category, Decimal("0")) + transaction.amount
    return totals


def expense_distribution(
    transactions: Iterable[Transaction],
    language: Optional[Language] = None,
) -> ExpenseDistribution:
    """
    Build the expense breakdown.

    Args:
        transactions: Any transactions; income entries are ignored
        language: Localize slice labels; None keeps the raw category keys

    Returns:
        Slices sorted by value, largest first. Categories with equal totals
        keep the order in which they first appear in `transactions`.
        With no expenses at all, the no-data distribution.
    """
    totals = group_expenses(transactions)
    if not totals:
        return ExpenseDistribution.no_data()

    # Stable sort: ties stay in first-appearance order
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    grand_total = sum(totals.values(), Decimal("0"))

    slices = []
    running = Decimal("0")
    start = 0.0
    for category, value in ordered:
        running += value
        end = float(running / grand_total)
        slices.append(DistributionSlice(
            category=category,
            label=category_label(category, language) if language else category,
            value=value,
            start_fraction=start,
            end_fraction=end,
        ))
        start = end

    return ExpenseDistribution(slices=tuple(slices), total=grand_total)
