"""
Storage Services Package

Provides abstract interfaces for persistence and an in-memory
implementation. Remote backends implement the same interfaces.
"""

from budgetwise.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    GoalStorageInterface,
    NotFoundError,
    ObligationStorageInterface,
    StaleObligationError,
    StorageError,
)
from budgetwise.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryGoalStorage,
    InMemoryObligationStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "GoalStorageInterface",
    "ObligationStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StaleObligationError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryGoalStorage",
    "InMemoryObligationStorage",
]
