"""
Data Models Package

This package contains all Pydantic models used by BudgetWise.
All data flowing through the engines and flows conforms to these schemas.
"""

from budgetwise.models.obligation import (
    DueStatus,
    Frequency,
    ObligationPartition,
    ObligationStatus,
    PaymentRecord,
    RecurringObligation,
)
from budgetwise.models.goal import (
    CompletionEstimate,
    EstimateBasis,
    Goal,
    GoalProgress,
    GoalProjection,
)
from budgetwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Obligation models
    "DueStatus",
    "Frequency",
    "ObligationPartition",
    "ObligationStatus",
    "PaymentRecord",
    "RecurringObligation",
    # Goal models
    "CompletionEstimate",
    "EstimateBasis",
    "Goal",
    "GoalProgress",
    "GoalProjection",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
