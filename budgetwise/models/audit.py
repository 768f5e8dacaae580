"""
Audit Models for BudgetWise

Every state change to an obligation or goal is logged for audit purposes.
This provides:
1. Traceability of "mark as paid" and "add funds" actions
2. Debugging information when a due date or balance looks wrong
3. A history the user can review

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each mutation in the obligation and goal lifecycles has its own type.
    """
    # Recurring obligations
    OBLIGATION_CREATED = "obligation_created"
    OBLIGATION_UPDATED = "obligation_updated"
    OBLIGATION_PAID = "obligation_paid"
    OBLIGATION_DELETED = "obligation_deleted"

    # Goals
    GOAL_CREATED = "goal_created"
    GOAL_UPDATED = "goal_updated"
    GOAL_CONTRIBUTION = "goal_contribution"
    GOAL_COMPLETED = "goal_completed"
    GOAL_PROGRESS_RESET = "goal_progress_reset"
    GOAL_DELETED = "goal_deleted"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity ('obligation' or 'goal')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate events from one user action"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.obligation_paid(obligation_id, ...)
        event = AuditEventBuilder.goal_completed(goal_id, ...)
    """

    @staticmethod
    def obligation_created(
        obligation_id: UUID,
        amount: Decimal,
        frequency: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OBLIGATION_CREATED,
            entity_type="obligation",
            entity_id=obligation_id,
            correlation_id=correlation_id,
            description=f"Recurring obligation created: {amount} {frequency}",
            details={
                "amount": str(amount),
                "frequency": frequency,
            },
            is_user_action=True,
        )

    @staticmethod
    def obligation_updated(
        obligation_id: UUID,
        changed_fields: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OBLIGATION_UPDATED,
            entity_type="obligation",
            entity_id=obligation_id,
            correlation_id=correlation_id,
            description=f"Recurring obligation edited: {', '.join(changed_fields)}",
            details={
                "changed_fields": changed_fields,
            },
            is_user_action=True,
        )

    @staticmethod
    def obligation_paid(
        obligation_id: UUID,
        paid_for_date: date,
        next_due_date: date,
        amount: Decimal,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OBLIGATION_PAID,
            entity_type="obligation",
            entity_id=obligation_id,
            correlation_id=correlation_id,
            description=f"Obligation paid for {paid_for_date}, next due {next_due_date}",
            details={
                "paid_for_date": paid_for_date.isoformat(),
                "next_due_date": next_due_date.isoformat(),
                "amount": str(amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def obligation_deleted(
        obligation_id: UUID,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OBLIGATION_DELETED,
            entity_type="obligation",
            entity_id=obligation_id,
            correlation_id=correlation_id,
            description="Recurring obligation deleted",
            is_user_action=True,
        )

    @staticmethod
    def goal_created(
        goal_id: UUID,
        name: str,
        target_amount: Decimal,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CREATED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Goal created: {name}",
            details={
                "name": name,
                "target_amount": str(target_amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_updated(
        goal_id: UUID,
        changed_fields: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_UPDATED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Goal edited: {', '.join(changed_fields)}",
            details={
                "changed_fields": changed_fields,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_contribution(
        goal_id: UUID,
        amount: Decimal,
        new_balance: Decimal,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_CONTRIBUTION,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description=f"Contribution of {amount} added to goal",
            details={
                "amount": str(amount),
                "new_balance": str(new_balance),
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_completed(
        goal_id: UUID,
        completed_at: datetime,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_COMPLETED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description="Goal reached its target",
            details={
                "completed_at": completed_at.isoformat(),
            },
        )

    @staticmethod
    def goal_progress_reset(
        goal_id: UUID,
        previous_amount: Decimal,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_PROGRESS_RESET,
            severity=AuditSeverity.WARNING,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description="Goal progress reset to zero",
            details={
                "previous_amount": str(previous_amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_deleted(
        goal_id: UUID,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_DELETED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=correlation_id,
            description="Goal deleted",
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
