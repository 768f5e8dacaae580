"""
Audit Logger

DESIGN DECISION: Every state change to an obligation or goal is logged.
This provides:
1. Traceability of payments and contributions
2. Debugging capability when a due date or balance looks wrong
3. A history the user can review

The audit logger:
- Is async so it can share the event loop with the flows
- Gracefully handles storage failures (doesn't crash the flow if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

import structlog

from budgetwise.config import get_settings
from budgetwise.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from budgetwise.services.storage import AuditStorageInterface


def configure_logging(level: Optional[str] = None) -> None:
    """Route structlog through stdlib logging with JSON output."""
    logging.basicConfig(
        format="%(message)s",
        level=level or get_settings().app.log_level,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("budgetwise.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_obligation_created(
        self,
        obligation_id: UUID,
        amount: Decimal,
        frequency: str,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.obligation_created(
            obligation_id=obligation_id,
            amount=amount,
            frequency=frequency,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_obligation_updated(
        self,
        obligation_id: UUID,
        changed_fields: list[str],
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.obligation_updated(
            obligation_id=obligation_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_obligation_paid(
        self,
        obligation_id: UUID,
        paid_for_date: date,
        next_due_date: date,
        amount: Decimal,
        correlation_id: UUID,
    ) -> None:
        """Log a due cycle being settled."""
        event = AuditEventBuilder.obligation_paid(
            obligation_id=obligation_id,
            paid_for_date=paid_for_date,
            next_due_date=next_due_date,
            amount=amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_obligation_deleted(
        self,
        obligation_id: UUID,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.obligation_deleted(
            obligation_id=obligation_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_goal_created(
        self,
        goal_id: UUID,
        name: str,
        target_amount: Decimal,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.goal_created(
            goal_id=goal_id,
            name=name,
            target_amount=target_amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_goal_updated(
        self,
        goal_id: UUID,
        changed_fields: list[str],
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.goal_updated(
            goal_id=goal_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_goal_contribution(
        self,
        goal_id: UUID,
        amount: Decimal,
        new_balance: Decimal,
        correlation_id: UUID,
    ) -> None:
        """Log funds added to (or corrected on) a goal."""
        event = AuditEventBuilder.goal_contribution(
            goal_id=goal_id,
            amount=amount,
            new_balance=new_balance,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_goal_completed(
        self,
        goal_id: UUID,
        completed_at: datetime,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.goal_completed(
            goal_id=goal_id,
            completed_at=completed_at,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_goal_progress_reset(
        self,
        goal_id: UUID,
        previous_amount: Decimal,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.goal_progress_reset(
            goal_id=goal_id,
            previous_amount=previous_amount,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_goal_deleted(
        self,
        goal_id: UUID,
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.goal_deleted(
            goal_id=goal_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., marking a bill paid).
    Pass it through all subsequent operations.
    """
    return uuid4()
