"""Period window matching."""

import datetime as dt

from taka_tracker.models.transaction import Period


def in_period(day: dt.date, period: Period, reference: dt.date) -> bool:
    """
    Check whether a day falls in the period window around a reference day.

    daily:   the exact same date
    monthly: same calendar year and month
    yearly:  same calendar year
    """
    if period == Period.DAILY:
        return day == reference
    if period == Period.MONTHLY:
        return day.year == reference.year and day.month == reference.month
    if period == Period.YEARLY:
        return day.year == reference.year
    raise ValueError(f"Unknown period: {period!r}")
