"""
Goal Projection Calculator

Derives progress and completion estimates from a goal's stored fields,
and applies contributions as pure copy-on-write updates.

COMPLETION POLICY:
- is_completed is recomputed from the amounts on every contribution,
  so a negative correction can un-complete a goal.
- completed_at is set once, when a goal with no completed_at first
  becomes completed. Un-completing and re-completing leave it at the
  first completion. Only reset_progress() clears it.
"""

import math
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from budgetwise.engine.dates import add_months, as_date, months_between
from budgetwise.engine.errors import InvalidContributionError
from budgetwise.models.goal import (
    CompletionEstimate,
    EstimateBasis,
    Goal,
    GoalProgress,
    GoalProjection,
)


def _to_amount(value) -> Decimal:
    """Convert a contribution to Decimal, rejecting NaN and infinities."""
    if isinstance(value, bool):
        raise InvalidContributionError("Contribution must be a number, not a bool")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidContributionError(f"Invalid contribution amount: {value!r}") from e
    if not amount.is_finite():
        raise InvalidContributionError(f"Contribution must be finite, got {value!r}")
    return amount


def _is_reached(goal: Goal) -> bool:
    return goal.current_amount >= goal.target_amount


def progress(goal: Goal) -> GoalProgress:
    """
    Percentage complete and remaining amount.

    A non-positive target gives 0%, never NaN or infinity. remaining is
    not clamped and goes negative once the target is overshot.
    """
    target = Decimal(goal.target_amount)
    current = Decimal(goal.current_amount)

    if target > 0:
        percentage = float(current / target * 100)
    else:
        percentage = 0.0

    return GoalProgress(
        percentage=percentage,
        remaining=target - current,
    )


def estimate_completion(goal: Goal, today: date) -> Optional[CompletionEstimate]:
    """
    Expected completion date, or None when it cannot be known.

    Precedence:
    1. Positive monthly allocation: ceil(remaining / allocation) months
       from today.
    2. Target date: the deadline itself, with the whole months left
       until it (negative once it has passed).
    3. Neither: None.

    Completed goals and goals with a non-positive target get None.
    """
    today = as_date(today)

    if goal.target_amount <= 0 or _is_reached(goal):
        return None

    remaining = goal.target_amount - goal.current_amount
    allocation = goal.monthly_allocation

    if allocation is not None and allocation > 0 and remaining > 0:
        months = math.ceil(remaining / allocation)
        return CompletionEstimate(
            estimated_date=add_months(today, months),
            months_remaining=months,
            basis=EstimateBasis.ALLOCATION,
        )

    if goal.target_date is not None:
        return CompletionEstimate(
            estimated_date=goal.target_date,
            months_remaining=months_between(today, goal.target_date),
            basis=EstimateBasis.TARGET_DATE,
        )

    return None


def apply_contribution(
    goal: Goal,
    amount,
    now: Optional[datetime] = None,
) -> Goal:
    """
    Add funds (or a negative correction) to a goal.

    Returns a new Goal; the input is untouched. Negative amounts are
    applied as-is, not clamped.

    Args:
        goal: Current goal state
        amount: Contribution; int, float or Decimal
        now: Completion timestamp to record (defaults to current UTC time)

    Raises:
        InvalidContributionError: If amount is NaN or infinite
    """
    amount = _to_amount(amount)
    new_current = goal.current_amount + amount
    is_completed = new_current >= goal.target_amount

    completed_at = goal.completed_at
    if is_completed and completed_at is None:
        completed_at = now or datetime.now(timezone.utc)

    return goal.model_copy(update={
        "current_amount": new_current,
        "is_completed": is_completed,
        "completed_at": completed_at,
    })


def reset_progress(goal: Goal) -> Goal:
    """Zero the balance and clear completion."""
    return goal.model_copy(update={
        "current_amount": Decimal("0"),
        "is_completed": False,
        "completed_at": None,
    })


def days_remaining(goal: Goal, today: date) -> Optional[int]:
    """Days left until the deadline, clamped at 0. None without a deadline."""
    if goal.target_date is None:
        return None
    return max((goal.target_date - as_date(today)).days, 0)


def project(goal: Goal, today: date) -> GoalProjection:
    """Progress plus estimate, as rendered on the goals screen."""
    return GoalProjection(
        goal_id=goal.id,
        progress=progress(goal),
        estimate=estimate_completion(goal, today),
        is_completed=_is_reached(goal),
        days_remaining=days_remaining(goal, today),
    )
