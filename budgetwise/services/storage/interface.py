"""
Abstract Storage Interface

DESIGN DECISION: Persistence belongs to an external data service (a hosted
relational backend reached over a CRUD API). We define an abstract
interface for the operations the flows need, so that:
1. The engines and flows never depend on a particular backend
2. In-memory storage can be used for testing and local runs
3. A remote implementation can be added without touching business logic

The interface is intentionally simple - we're not building a full ORM.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from budgetwise.models.audit import AuditEvent
from budgetwise.models.goal import Goal
from budgetwise.models.obligation import PaymentRecord, RecurringObligation


class ObligationStorageInterface(ABC):
    """
    Abstract interface for recurring obligation storage.

    Deletion is soft: deleted obligations stay stored with
    is_active=False and are excluded from listings.
    """

    @abstractmethod
    async def save_obligation(self, obligation: RecurringObligation) -> bool:
        """
        Save a new obligation.

        Raises:
            DuplicateError: If an obligation with this ID exists
        """
        pass

    @abstractmethod
    async def get_obligation(self, obligation_id: UUID) -> Optional[RecurringObligation]:
        """Retrieve an obligation by ID, or None."""
        pass

    @abstractmethod
    async def update_obligation(self, obligation: RecurringObligation) -> bool:
        """
        Replace an existing obligation.

        Raises:
            NotFoundError: If the obligation doesn't exist
        """
        pass

    @abstractmethod
    async def delete_obligation(self, obligation_id: UUID) -> bool:
        """
        Soft-delete an obligation.

        Returns:
            True if an active obligation was deactivated
        """
        pass

    @abstractmethod
    async def list_obligations(self, include_inactive: bool = False) -> list[RecurringObligation]:
        """List obligations ordered by next due date."""
        pass

    @abstractmethod
    async def record_payment(self, payment: PaymentRecord) -> bool:
        """Store the expense created by marking an obligation paid."""
        pass

    @abstractmethod
    async def list_payments(self, obligation_id: Optional[UUID] = None) -> list[PaymentRecord]:
        """List payment records, optionally for one obligation."""
        pass


class GoalStorageInterface(ABC):
    """Abstract interface for savings goal storage."""

    @abstractmethod
    async def save_goal(self, goal: Goal) -> bool:
        """
        Save a new goal.

        Raises:
            DuplicateError: If a goal with this ID exists
        """
        pass

    @abstractmethod
    async def get_goal(self, goal_id: UUID) -> Optional[Goal]:
        """Retrieve a goal by ID, or None."""
        pass

    @abstractmethod
    async def update_goal(self, goal: Goal) -> bool:
        """
        Replace an existing goal.

        Raises:
            NotFoundError: If the goal doesn't exist
        """
        pass

    @abstractmethod
    async def delete_goal(self, goal_id: UUID) -> bool:
        """Delete a goal. Returns True if it existed."""
        pass

    @abstractmethod
    async def list_goals(self) -> list[Goal]:
        """List goals: active first, then newest first."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for one entity in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class StaleObligationError(StorageError):
    """
    The stored due date no longer matches what the caller saw.

    Raised instead of advancing a due date twice for one payment.
    """
    pass
