"""
Main Orchestrator for BudgetWise

This module ties the pure engines to storage and the audit trail, and
defines the end-to-end flows for:
1. Recurring obligations (list by urgency, mark as paid, edit, delete)
2. Savings goals (add funds, reset progress, projections, edit, delete)

DESIGN DECISION: The engines never persist anything. The flows are the
calling layer: they load a snapshot, run the engine, write the result
back, and audit the change. They also serialise "mark as paid" and
"add funds" per flow instance, so one payment advances a due date once.
"""

import asyncio
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from budgetwise.audit import AuditLogger, create_correlation_id
from budgetwise.config import EngineSettings, get_settings
from budgetwise.engine import goals as goal_engine
from budgetwise.engine import recurring as recurring_engine
from budgetwise.engine.errors import EngineError
from budgetwise.models.goal import Goal, GoalProjection
from budgetwise.models.obligation import (
    ObligationPartition,
    ObligationStatus,
    PaymentRecord,
    RecurringObligation,
)
from budgetwise.services.storage import (
    GoalStorageInterface,
    InMemoryAuditStorage,
    InMemoryGoalStorage,
    InMemoryObligationStorage,
    NotFoundError,
    ObligationStorageInterface,
    StaleObligationError,
    StorageError,
)


_IMMUTABLE_FIELDS = {"id", "created_at"}


def _changed_fields(current: dict, updates: dict) -> list[str]:
    return sorted(k for k, v in updates.items() if current.get(k) != v)


class RecurringFlow:
    """
    Orchestrates recurring obligations.

    Mark-as-paid flow:
    1. Load the obligation from storage
    2. Check it is still due on the date the user saw (if given)
    3. Advance the due date one period (engine)
    4. Persist the new date and the payment record
    5. Audit
    """

    def __init__(
        self,
        storage: Optional[ObligationStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self._storage = storage or InMemoryObligationStorage()
        self._audit_logger = audit_logger or AuditLogger()
        self._settings = settings or get_settings().engine
        self._lock = asyncio.Lock()

    async def _load_active(self, obligation_id: UUID) -> RecurringObligation:
        obligation = await self._storage.get_obligation(obligation_id)
        if obligation is None or not obligation.is_active:
            raise NotFoundError(f"Obligation {obligation_id} not found")
        return obligation

    async def create_obligation(
        self,
        obligation: RecurringObligation,
        correlation_id: Optional[UUID] = None,
    ) -> RecurringObligation:
        correlation_id = correlation_id or create_correlation_id()
        await self._storage.save_obligation(obligation)
        await self._audit_logger.log_obligation_created(
            obligation_id=obligation.id,
            amount=obligation.amount,
            frequency=obligation.frequency.value,
            correlation_id=correlation_id,
        )
        return obligation

    async def update_obligation(
        self,
        obligation_id: UUID,
        updates: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> RecurringObligation:
        """
        Apply a direct user edit (amount, frequency, date, ...).

        The edited record is re-validated, so an unknown frequency is
        rejected here rather than stored. Edits share the payment lock so
        they never write back a due date that a payment just advanced.
        """
        correlation_id = correlation_id or create_correlation_id()
        bad = _IMMUTABLE_FIELDS & updates.keys()
        if bad:
            raise ValueError(f"Cannot edit fields: {sorted(bad)}")

        async with self._lock:
            current = await self._load_active(obligation_id)
            current_data = current.model_dump()
            updated = RecurringObligation.model_validate({**current_data, **updates})
            await self._storage.update_obligation(updated)

        await self._audit_logger.log_obligation_updated(
            obligation_id=obligation_id,
            changed_fields=_changed_fields(current_data, updated.model_dump()),
            correlation_id=correlation_id,
        )
        return updated

    async def delete_obligation(
        self,
        obligation_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        correlation_id = correlation_id or create_correlation_id()
        deleted = await self._storage.delete_obligation(obligation_id)
        if deleted:
            await self._audit_logger.log_obligation_deleted(
                obligation_id=obligation_id,
                correlation_id=correlation_id,
            )
        return deleted

    async def list_due(
        self,
        today: date,
        upcoming_window_days: Optional[int] = None,
    ) -> ObligationPartition:
        """
        Active obligations split into overdue / upcoming / other.

        upcoming_window_days defaults to BUDGETWISE_UPCOMING_WINDOW_DAYS.
        """
        if upcoming_window_days is None:
            upcoming_window_days = self._settings.upcoming_window_days
        obligations = await self._storage.list_obligations()
        return recurring_engine.partition(obligations, today, upcoming_window_days)

    async def statuses(self, today: date) -> list[ObligationStatus]:
        obligations = await self._storage.list_obligations()
        return [
            recurring_engine.due_status(o, today, self._settings.due_soon_days)
            for o in obligations
        ]

    async def monthly_total(self) -> Decimal:
        """What the active obligations cost per month."""
        obligations = await self._storage.list_obligations()
        return recurring_engine.monthly_total(obligations)

    async def mark_as_paid(
        self,
        obligation_id: UUID,
        expected_due_date: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[RecurringObligation, PaymentRecord]:
        """
        Settle the current due cycle of an obligation.

        Args:
            obligation_id: Obligation to mark paid
            expected_due_date: Due date the user was shown. If the stored
                               date differs, someone already paid this
                               cycle and StaleObligationError is raised.
            correlation_id: Correlates audit events

        Returns:
            (updated_obligation, payment_record)
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock:
            try:
                obligation = await self._load_active(obligation_id)
                if (
                    expected_due_date is not None
                    and obligation.next_due_date != expected_due_date
                ):
                    raise StaleObligationError(
                        f"Obligation {obligation_id} is now due "
                        f"{obligation.next_due_date}, not {expected_due_date}"
                    )

                updated, payment = recurring_engine.mark_paid(obligation)
                await self._storage.update_obligation(updated)
                try:
                    await self._storage.record_payment(payment)
                except StorageError:
                    # Put the cycle back so the payment can be retried
                    await self._storage.update_obligation(obligation)
                    raise
            except (EngineError, StorageError) as e:
                await self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"obligation_id": str(obligation_id)},
                    correlation_id=correlation_id,
                )
                raise

        await self._audit_logger.log_obligation_paid(
            obligation_id=obligation_id,
            paid_for_date=payment.paid_for_date,
            next_due_date=updated.next_due_date,
            amount=payment.amount,
            correlation_id=correlation_id,
        )
        return updated, payment


class GoalFlow:
    """
    Orchestrates savings goals.

    Add-funds flow:
    1. Load the goal
    2. Apply the contribution (engine; recomputes completion)
    3. Persist
    4. Audit the contribution, and the completion on its first occurrence
    """

    def __init__(
        self,
        storage: Optional[GoalStorageInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage or InMemoryGoalStorage()
        self._audit_logger = audit_logger or AuditLogger()
        self._lock = asyncio.Lock()

    async def _load(self, goal_id: UUID) -> Goal:
        goal = await self._storage.get_goal(goal_id)
        if goal is None:
            raise NotFoundError(f"Goal {goal_id} not found")
        return goal

    async def create_goal(
        self,
        goal: Goal,
        correlation_id: Optional[UUID] = None,
    ) -> Goal:
        correlation_id = correlation_id or create_correlation_id()
        # Goals can be created already funded (e.g. onboarding)
        goal = goal_engine.apply_contribution(goal, 0)
        await self._storage.save_goal(goal)
        await self._audit_logger.log_goal_created(
            goal_id=goal.id,
            name=goal.name,
            target_amount=goal.target_amount,
            correlation_id=correlation_id,
        )
        return goal

    async def update_goal(
        self,
        goal_id: UUID,
        updates: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> Goal:
        """
        Apply a direct user edit (name, target, allocation, deadline, ...).

        Completion is recomputed afterwards, so raising the target can
        un-complete a goal.
        """
        correlation_id = correlation_id or create_correlation_id()
        bad = (_IMMUTABLE_FIELDS | {"is_completed", "completed_at"}) & updates.keys()
        if bad:
            raise ValueError(f"Cannot edit fields: {sorted(bad)}")

        async with self._lock:
            current = await self._load(goal_id)
            current_data = current.model_dump()
            updated = Goal.model_validate({**current_data, **updates})
            updated = goal_engine.apply_contribution(updated, 0)
            await self._storage.update_goal(updated)

        await self._audit_logger.log_goal_updated(
            goal_id=goal_id,
            changed_fields=_changed_fields(current_data, updated.model_dump()),
            correlation_id=correlation_id,
        )
        if updated.completed_at is not None and current.completed_at is None:
            await self._audit_logger.log_goal_completed(
                goal_id=goal_id,
                completed_at=updated.completed_at,
                correlation_id=correlation_id,
            )
        return updated

    async def delete_goal(
        self,
        goal_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        correlation_id = correlation_id or create_correlation_id()
        deleted = await self._storage.delete_goal(goal_id)
        if deleted:
            await self._audit_logger.log_goal_deleted(
                goal_id=goal_id,
                correlation_id=correlation_id,
            )
        return deleted

    async def add_funds(
        self,
        goal_id: UUID,
        amount,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Goal:
        """
        Add a contribution (or negative correction) to a goal.

        Raises:
            NotFoundError: If the goal doesn't exist
            InvalidContributionError: If amount is NaN or infinite
        """
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock:
            try:
                goal = await self._load(goal_id)
                updated = goal_engine.apply_contribution(goal, amount, now=now)
                await self._storage.update_goal(updated)
            except (EngineError, StorageError) as e:
                await self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"goal_id": str(goal_id)},
                    correlation_id=correlation_id,
                )
                raise

        await self._audit_logger.log_goal_contribution(
            goal_id=goal_id,
            amount=updated.current_amount - goal.current_amount,
            new_balance=updated.current_amount,
            correlation_id=correlation_id,
        )
        if updated.completed_at is not None and goal.completed_at is None:
            await self._audit_logger.log_goal_completed(
                goal_id=goal_id,
                completed_at=updated.completed_at,
                correlation_id=correlation_id,
            )
        return updated

    async def reset_progress(
        self,
        goal_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> Goal:
        correlation_id = correlation_id or create_correlation_id()

        async with self._lock:
            goal = await self._load(goal_id)
            updated = goal_engine.reset_progress(goal)
            await self._storage.update_goal(updated)

        await self._audit_logger.log_goal_progress_reset(
            goal_id=goal_id,
            previous_amount=goal.current_amount,
            correlation_id=correlation_id,
        )
        return updated

    async def get_projection(self, goal_id: UUID, today: date) -> GoalProjection:
        goal = await self._load(goal_id)
        return goal_engine.project(goal, today)

    async def list_projections(self, today: date) -> list[GoalProjection]:
        goals = await self._storage.list_goals()
        return [goal_engine.project(g, today) for g in goals]


def create_app_components() -> tuple[RecurringFlow, GoalFlow, AuditLogger]:
    """
    Factory function to create all application components.

    Wires both flows to in-memory storage and a shared audit logger.
    A remote backend would be plugged in here by passing its
    implementations of the storage interfaces instead.

    Returns:
        (recurring_flow, goal_flow, audit_logger)
    """
    audit_logger = AuditLogger(InMemoryAuditStorage())

    recurring_flow = RecurringFlow(
        storage=InMemoryObligationStorage(),
        audit_logger=audit_logger,
    )
    goal_flow = GoalFlow(
        storage=InMemoryGoalStorage(),
        audit_logger=audit_logger,
    )

    return recurring_flow, goal_flow, audit_logger
