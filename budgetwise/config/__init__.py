"""Configuration package."""

from budgetwise.config.settings import (
    AppSettings,
    EngineSettings,
    Settings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "EngineSettings",
    "Settings",
    "get_settings",
]
