"""Services package."""

from budgetwise.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    GoalStorageInterface,
    InMemoryAuditStorage,
    InMemoryGoalStorage,
    InMemoryObligationStorage,
    NotFoundError,
    ObligationStorageInterface,
    StaleObligationError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "GoalStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryGoalStorage",
    "InMemoryObligationStorage",
    "NotFoundError",
    "ObligationStorageInterface",
    "StaleObligationError",
    "StorageError",
]
