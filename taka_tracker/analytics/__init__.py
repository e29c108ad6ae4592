"""Aggregation package: derived statistics over transactions."""

from taka_tracker.analytics.distribution import expense_distribution, group_expenses

__all__ = ["expense_distribution", "group_expenses"]
