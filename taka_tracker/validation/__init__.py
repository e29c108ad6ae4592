"""Input validation package."""

from taka_tracker.validation.validator import (
    TransactionValidator,
    parse_amount,
    validate_budget_fields,
)

__all__ = ["TransactionValidator", "parse_amount", "validate_budget_fields"]
