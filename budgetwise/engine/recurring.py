"""
Recurring Obligation Engine

Classifies recurring expenses by urgency and moves their due dates
forward when they are paid.

GUARANTEES:
- Pure functions: nothing here reads the clock, touches storage or
  mutates its inputs. "today" is always passed in.
- Date-only comparisons. Datetimes are truncated before use.
- advance() moves exactly one period per call, computed only from the
  stored next_due_date.
- Unknown frequencies raise InvalidFrequencyError; there is no default.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from budgetwise.engine.dates import add_months, add_years, as_date
from budgetwise.engine.errors import InvalidFrequencyError, InvalidWindowError
from budgetwise.models.obligation import (
    DueStatus,
    Frequency,
    ObligationPartition,
    ObligationStatus,
    PaymentRecord,
    RecurringObligation,
)


# How many months one period spans, used for the monthly equivalent.
_MONTHS_PER_PERIOD = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.YEARLY: 12,
}


def _coerce_frequency(value) -> Frequency:
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(value)
    except ValueError as e:
        raise InvalidFrequencyError(value) from e


def _check_window(days: int, name: str) -> int:
    if days < 0:
        raise InvalidWindowError(f"{name} must be >= 0, got {days}")
    return days


def partition(
    obligations: Iterable[RecurringObligation],
    today: date,
    upcoming_window_days: int = 7,
) -> ObligationPartition:
    """
    Split obligations into overdue, upcoming and other.

    - overdue:  due date strictly before today
    - upcoming: today <= due date <= today + window
    - other:    everything later

    Something due today is upcoming, never overdue. Each list keeps the
    input order; callers sort if they want to.

    Args:
        obligations: Snapshot to classify
        today: Reference date (datetimes are truncated)
        upcoming_window_days: Look-ahead in days

    Raises:
        InvalidWindowError: If the window is negative
    """
    today = as_date(today)
    window = _check_window(upcoming_window_days, "upcoming_window_days")
    horizon = today + timedelta(days=window)

    result = ObligationPartition()
    for obligation in obligations:
        due = as_date(obligation.next_due_date)
        if due < today:
            result.overdue.append(obligation)
        elif due <= horizon:
            result.upcoming.append(obligation)
        else:
            result.other.append(obligation)
    return result


def advance(obligation: RecurringObligation) -> date:
    """
    Next due date after one payment.

    monthly   -> +1 month
    quarterly -> +3 months
    yearly    -> +1 year
    Day of month is kept where it exists, otherwise clamped to the last
    day of the month.

    Raises:
        InvalidFrequencyError: If the frequency is not recognized
    """
    frequency = _coerce_frequency(obligation.frequency)
    current = as_date(obligation.next_due_date)

    if frequency == Frequency.MONTHLY:
        return add_months(current, 1)
    elif frequency == Frequency.QUARTERLY:
        return add_months(current, 3)
    else:
        return add_years(current, 1)


def monthly_equivalent(obligation: RecurringObligation) -> Decimal:
    """
    Amount normalized to one month (quarterly / 3, yearly / 12).

    For display totals only; never used for due dates.
    """
    frequency = _coerce_frequency(obligation.frequency)
    return Decimal(obligation.amount) / _MONTHS_PER_PERIOD[frequency]


def monthly_total(obligations: Iterable[RecurringObligation]) -> Decimal:
    """Sum of monthly equivalents."""
    return sum(
        (monthly_equivalent(o) for o in obligations),
        Decimal("0"),
    )


def yearly_total(obligations: Iterable[RecurringObligation]) -> Decimal:
    return monthly_total(obligations) * 12


def due_status(
    obligation: RecurringObligation,
    today: date,
    due_soon_days: int = 3,
) -> ObligationStatus:
    """
    Status badge for a single obligation.

    days_until is negative for overdue items. Items due within
    due_soon_days are DUE_SOON.
    """
    today = as_date(today)
    threshold = _check_window(due_soon_days, "due_soon_days")
    days_until = (as_date(obligation.next_due_date) - today).days

    if days_until < 0:
        status = DueStatus.OVERDUE
    elif days_until == 0:
        status = DueStatus.DUE_TODAY
    elif days_until <= threshold:
        status = DueStatus.DUE_SOON
    else:
        status = DueStatus.SCHEDULED

    return ObligationStatus(
        obligation_id=obligation.id,
        due_status=status,
        days_until=days_until,
    )


def mark_paid(
    obligation: RecurringObligation,
) -> tuple[RecurringObligation, PaymentRecord]:
    """
    Settle the current due cycle.

    Returns the obligation with its due date advanced one period, and the
    expense record for the cycle that was paid (dated at the old due date).
    The input is not modified; persisting both is the caller's job.
    """
    next_due = advance(obligation)
    payment = PaymentRecord(
        obligation_id=obligation.id,
        category_id=obligation.category_id,
        amount=obligation.amount,
        description=obligation.description,
        paid_for_date=as_date(obligation.next_due_date),
    )
    updated = obligation.model_copy(update={"next_due_date": next_due})
    return updated, payment
