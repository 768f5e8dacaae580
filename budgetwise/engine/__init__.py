"""Calculation engines package."""

from budgetwise.engine import goals, recurring
from budgetwise.engine.errors import (
    EngineError,
    InvalidContributionError,
    InvalidFrequencyError,
    InvalidWindowError,
)

__all__ = [
    "goals",
    "recurring",
    "EngineError",
    "InvalidContributionError",
    "InvalidFrequencyError",
    "InvalidWindowError",
]
