"""
In-Memory Storage Implementation

Dict-backed implementation of the storage interfaces. Used by the test
suite and for running the flows without a remote data service.

Rows are stored as model copies so callers can't mutate stored state
through objects they hold.
"""

from typing import Optional
from uuid import UUID

from budgetwise.models.audit import AuditEvent
from budgetwise.models.goal import Goal
from budgetwise.models.obligation import PaymentRecord, RecurringObligation
from budgetwise.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    GoalStorageInterface,
    NotFoundError,
    ObligationStorageInterface,
)


class InMemoryObligationStorage(ObligationStorageInterface):
    """Obligations and their payment records held in dicts."""

    def __init__(self):
        self._obligations: dict[UUID, RecurringObligation] = {}
        self._payments: list[PaymentRecord] = []

    async def save_obligation(self, obligation: RecurringObligation) -> bool:
        if obligation.id in self._obligations:
            raise DuplicateError(f"Obligation {obligation.id} already exists")
        self._obligations[obligation.id] = obligation.model_copy()
        return True

    async def get_obligation(self, obligation_id: UUID) -> Optional[RecurringObligation]:
        obligation = self._obligations.get(obligation_id)
        return obligation.model_copy() if obligation else None

    async def update_obligation(self, obligation: RecurringObligation) -> bool:
        if obligation.id not in self._obligations:
            raise NotFoundError(f"Obligation {obligation.id} not found")
        self._obligations[obligation.id] = obligation.model_copy()
        return True

    async def delete_obligation(self, obligation_id: UUID) -> bool:
        obligation = self._obligations.get(obligation_id)
        if obligation is None or not obligation.is_active:
            return False
        self._obligations[obligation_id] = obligation.model_copy(
            update={"is_active": False}
        )
        return True

    async def list_obligations(self, include_inactive: bool = False) -> list[RecurringObligation]:
        obligations = [
            o.model_copy()
            for o in self._obligations.values()
            if include_inactive or o.is_active
        ]
        obligations.sort(key=lambda o: o.next_due_date)
        return obligations

    async def record_payment(self, payment: PaymentRecord) -> bool:
        self._payments.append(payment.model_copy())
        return True

    async def list_payments(self, obligation_id: Optional[UUID] = None) -> list[PaymentRecord]:
        return [
            p.model_copy()
            for p in self._payments
            if obligation_id is None or p.obligation_id == obligation_id
        ]


class InMemoryGoalStorage(GoalStorageInterface):
    """Goals held in a dict."""

    def __init__(self):
        self._goals: dict[UUID, Goal] = {}

    async def save_goal(self, goal: Goal) -> bool:
        if goal.id in self._goals:
            raise DuplicateError(f"Goal {goal.id} already exists")
        self._goals[goal.id] = goal.model_copy()
        return True

    async def get_goal(self, goal_id: UUID) -> Optional[Goal]:
        goal = self._goals.get(goal_id)
        return goal.model_copy() if goal else None

    async def update_goal(self, goal: Goal) -> bool:
        if goal.id not in self._goals:
            raise NotFoundError(f"Goal {goal.id} not found")
        self._goals[goal.id] = goal.model_copy()
        return True

    async def delete_goal(self, goal_id: UUID) -> bool:
        return self._goals.pop(goal_id, None) is not None

    async def list_goals(self) -> list[Goal]:
        goals = [g.model_copy() for g in self._goals.values()]
        # Newest first, then stable-sort completed goals to the end
        goals.sort(key=lambda g: g.created_at, reverse=True)
        goals.sort(key=lambda g: g.is_completed)
        return goals


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
