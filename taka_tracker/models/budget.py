"""
Budget Models

A budget is a monthly spending ceiling for one expense category.
At most one budget exists per category.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CategoryBudget(BaseModel):
    """Spending limit for one expense category."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    category: str = Field(
        ...,
        min_length=1,
        description="Expense category key"
    )
    limit: Decimal = Field(
        ...,
        gt=0,
        description="Monthly limit in the app currency"
    )

    @field_validator("limit")
    @classmethod
    def limit_must_be_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("Limit must be a finite number")
        return v


class BudgetProgress(BaseModel):
    """
    How much of a budget has been spent this month.

    `percent` is clamped to 100 for display. `ratio` is the raw
    spent/limit value for callers that need the overspend.
    """
    model_config = ConfigDict(frozen=True)

    category: str
    limit: Decimal
    spent: Decimal = Field(ge=0)
    percent: float = Field(ge=0.0, le=100.0)
    ratio: float = Field(ge=0.0)

    @property
    def over_budget(self) -> bool:
        """Spending reached or passed the limit."""
        return self.spent >= self.limit

    @property
    def remaining(self) -> Decimal:
        """What is left before the limit; negative when over budget."""
        return self.limit - self.spent
