"""
Savings Goal Models

A goal is a savings target with optional pacing (a monthly allocation)
and/or a deadline. Projections derived from it are read-only.

DESIGN DECISION: Amount fields are not range-checked here. The data store
validates goals on write; the calculator must stay total even for
degenerate rows (e.g. a zero target) that slip through.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class EstimateBasis(str, Enum):
    """Where a completion estimate came from."""
    ALLOCATION = "allocation"    # remaining / monthly allocation
    TARGET_DATE = "target_date"  # user-supplied deadline, passed through


class Goal(BaseModel):
    """
    A user-defined savings target.

    is_completed is true iff current_amount >= target_amount.
    completed_at records the FIRST completion and is only cleared by an
    explicit progress reset.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique goal ID"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Goal name, e.g. 'Emergency fund'"
    )
    icon: Optional[str] = Field(
        default=None,
        max_length=50,
        description="Display icon key"
    )
    target_amount: Decimal = Field(
        ...,
        description="Amount to reach"
    )
    current_amount: Decimal = Field(
        default=Decimal("0"),
        description="Amount saved so far"
    )
    monthly_allocation: Optional[Decimal] = Field(
        default=None,
        description="Planned monthly contribution"
    )
    target_date: Optional[date] = Field(
        default=None,
        description="Optional deadline"
    )
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @field_validator('target_date', mode='before')
    @classmethod
    def truncate_timestamp(cls, v):
        """Deadlines are calendar dates; drop any time component."""
        if isinstance(v, datetime):
            return v.date()
        return v

    @model_validator(mode='after')
    def derive_completion(self) -> "Goal":
        """A stored flag never overrides the amounts."""
        self.is_completed = self.current_amount >= self.target_amount
        return self


class GoalProgress(BaseModel):
    """Percentage complete and amount still missing."""

    percentage: float = Field(
        ...,
        description="0 when the target is not positive; may exceed 100"
    )
    remaining: Decimal = Field(
        ...,
        description="target - current; negative when overshot"
    )

    @property
    def display_percentage(self) -> float:
        """Percentage clamped to 0..100 for progress bars."""
        return max(0.0, min(self.percentage, 100.0))

    @property
    def display_remaining(self) -> Decimal:
        return max(self.remaining, Decimal("0"))


class CompletionEstimate(BaseModel):
    """When the goal is expected to be reached."""

    estimated_date: date
    months_remaining: int = Field(
        ...,
        description="Whole months until estimated_date (negative if past)"
    )
    basis: EstimateBasis


class GoalProjection(BaseModel):
    """Everything the goals screen renders for one goal."""

    goal_id: UUID
    progress: GoalProgress
    estimate: Optional[CompletionEstimate] = None
    is_completed: bool
    days_remaining: Optional[int] = Field(
        default=None,
        description="Days until target_date, 0 once it has passed; None without a deadline"
    )
