"""
Calendar helpers shared by both engines.

All values here are datetime.date. relativedelta clamps to the last day
of the target month, which gives the rollover rule we want
(Jan 31 + 1 month -> Feb 28/29, Feb 29 + 1 year -> Feb 28).
"""

from datetime import date, datetime

from dateutil.relativedelta import relativedelta


def as_date(value) -> date:
    """Truncate a datetime to its calendar date; pass dates through."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected a date, got {type(value).__name__}")


def add_months(start: date, months: int) -> date:
    return start + relativedelta(months=months)


def add_years(start: date, years: int) -> date:
    return start + relativedelta(years=years)


def months_between(start: date, end: date) -> int:
    """
    Whole calendar months from start to end.

    Truncated toward zero, negative when end is before start.
    """
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months
