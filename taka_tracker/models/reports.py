"""
Report Models

Read-only views derived from the ledger: period statistics, the expense
distribution that drives the circular chart, and export rows.
"""

import datetime as dt
import math
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from taka_tracker.models.transaction import Period, Transaction


# =============================================================================
# PERIOD STATISTICS
# =============================================================================

class PeriodStats(BaseModel):
    """Transactions inside one period window and their totals."""
    model_config = ConfigDict(frozen=True)

    period: Period
    reference: dt.date = Field(
        ...,
        description="Day the period window is anchored to"
    )
    transactions: tuple[Transaction, ...] = ()
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expense

    @property
    def count(self) -> int:
        return len(self.transactions)


# =============================================================================
# EXPENSE DISTRIBUTION
# =============================================================================

class DistributionSlice(BaseModel):
    """
    One category's share of total expenses.

    Fractions are of a full turn: the slice covers
    [start_fraction, end_fraction) of the circle.
    """
    model_config = ConfigDict(frozen=True)

    category: str
    label: str
    value: Decimal = Field(gt=0)
    start_fraction: float = Field(ge=0.0, le=1.0)
    end_fraction: float = Field(ge=0.0, le=1.0)

    @property
    def fraction(self) -> float:
        return self.end_fraction - self.start_fraction

    @property
    def percent(self) -> float:
        return self.fraction * 100

    @property
    def start_angle(self) -> float:
        """Start of the arc in degrees, clockwise from the chart origin."""
        return self.start_fraction * 360.0

    @property
    def sweep_angle(self) -> float:
        """Arc length in degrees."""
        return self.fraction * 360.0

    @property
    def large_arc(self) -> bool:
        """SVG large-arc flag: the slice covers more than half the circle."""
        return self.fraction > 0.5

    def arc_path(self, radius: float = 1.0) -> str:
        """
        SVG path for this slice on a circle centred at the origin.

        A slice covering the whole circle is drawn as two half arcs, since a
        single SVG arc with identical endpoints renders nothing.
        """
        start_x, start_y = _point_on_circle(self.start_fraction, radius)
        end_x, end_y = _point_on_circle(self.end_fraction, radius)

        if self.start_fraction == 0.0 and self.end_fraction == 1.0:
            mid_x, mid_y = _point_on_circle(0.5, radius)
            return (
                f"M {start_x} {start_y} "
                f"A {radius} {radius} 0 1 1 {mid_x} {mid_y} "
                f"A {radius} {radius} 0 1 1 {end_x} {end_y} Z"
            )

        large_arc_flag = 1 if self.large_arc else 0
        return (
            f"M {start_x} {start_y} "
            f"A {radius} {radius} 0 {large_arc_flag} 1 {end_x} {end_y} "
            f"L 0 0"
        )


def _point_on_circle(fraction: float, radius: float) -> tuple[float, float]:
    angle = 2 * math.pi * fraction
    return radius * math.cos(angle), radius * math.sin(angle)


class ExpenseDistribution(BaseModel):
    """
    Expenses grouped by category, largest first.

    An empty distribution (no expenses at all) is a normal result: callers
    check `has_data` and show a placeholder instead of a chart.
    """
    model_config = ConfigDict(frozen=True)

    slices: tuple[DistributionSlice, ...] = ()
    total: Decimal = Decimal("0")

    @property
    def has_data(self) -> bool:
        return len(self.slices) > 0

    @classmethod
    def no_data(cls) -> "ExpenseDistribution":
        return cls()

    def top(self, n: int) -> tuple[DistributionSlice, ...]:
        """The n largest slices, for a chart legend."""
        return self.slices[: max(0, n)]

    def get(self, category: str) -> Optional[DistributionSlice]:
        for slice_ in self.slices:
            if slice_.category == category:
                return slice_
        return None


# =============================================================================
# EXPORT
# =============================================================================

class ExportRow(BaseModel):
    """One flat record of an export, labels already localized."""
    model_config = ConfigDict(frozen=True)

    date: str
    type_label: str
    category_label: str
    amount: str
    payment_label: str
    note: str = ""

    def as_list(self) -> list[str]:
        return [
            self.date,
            self.type_label,
            self.category_label,
            self.amount,
            self.payment_label,
            self.note,
        ]
