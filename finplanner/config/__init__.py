"""Configuration package."""

from finplanner.config.settings import (
    AppSettings,
    GeminiSettings,
    GoogleSheetsSettings,
    PlanningSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "GoogleSheetsSettings",
    "PlanningSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
