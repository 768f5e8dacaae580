"""
Recurring Obligation Models

These models describe recurring expenses (rent, utilities, subscriptions)
that the user tracks for due-date reminders.

DESIGN DECISION: Due dates are plain calendar dates. Timestamps coming
from the data store are truncated to their date on the way in, so every
comparison downstream is date-only and timezone-free.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Frequency(str, Enum):
    """
    How often a recurring obligation falls due.

    CRITICAL: Only these three values exist. An unknown tag is a
    programming error and is rejected, never defaulted to monthly.
    """
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class DueStatus(str, Enum):
    """Display status of a single obligation relative to today."""
    OVERDUE = "overdue"
    DUE_TODAY = "due_today"
    DUE_SOON = "due_soon"
    SCHEDULED = "scheduled"


def _truncate_to_date(value):
    if isinstance(value, datetime):
        return value.date()
    return value


# =============================================================================
# CORE OBLIGATION MODEL
# =============================================================================

class RecurringObligation(BaseModel):
    """
    A recurring expense tracked for reminders.

    next_due_date only ever moves forward, one frequency unit per payment.
    The engine computes the new date; the caller persists it.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique obligation ID"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount due each period (currency-agnostic)"
    )
    frequency: Frequency = Field(
        ...,
        description="Billing frequency"
    )
    next_due_date: date = Field(
        ...,
        description="Next date the obligation is expected to be paid"
    )
    category_id: Optional[UUID] = Field(
        default=None,
        description="Spending category (lookup only)"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=200,
        description="Free-text label, e.g. 'Netflix'"
    )
    is_active: bool = Field(
        default=True,
        description="False once the user deletes it (soft delete)"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @field_validator('next_due_date', mode='before')
    @classmethod
    def truncate_timestamp(cls, v):
        """Accept timestamps but keep only the calendar date."""
        return _truncate_to_date(v)

    @field_validator('frequency', mode='before')
    @classmethod
    def normalize_frequency(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class PaymentRecord(BaseModel):
    """
    Expense transaction created when an obligation is marked paid.

    paid_for_date is the due date that was settled, not the day the
    user pressed the button.
    """

    id: UUID = Field(default_factory=uuid4)
    obligation_id: UUID
    category_id: Optional[UUID] = None
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = None
    paid_for_date: date
    recorded_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


# =============================================================================
# DERIVED MODELS
# =============================================================================

class ObligationPartition(BaseModel):
    """
    Obligations split by urgency.

    The three lists are disjoint and keep the input order.
    """

    overdue: list[RecurringObligation] = Field(default_factory=list)
    upcoming: list[RecurringObligation] = Field(default_factory=list)
    other: list[RecurringObligation] = Field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.overdue) + len(self.upcoming) + len(self.other)

    @property
    def needs_attention(self) -> bool:
        """True when anything is overdue or due inside the window."""
        return bool(self.overdue or self.upcoming)


class ObligationStatus(BaseModel):
    """Per-item status shown next to an obligation."""

    obligation_id: UUID
    due_status: DueStatus
    days_until: int = Field(
        ...,
        description="Days from today to the due date (negative when overdue)"
    )

    @property
    def can_mark_paid(self) -> bool:
        return self.due_status in (DueStatus.OVERDUE, DueStatus.DUE_TODAY)
