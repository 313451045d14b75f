"""
Configuration Management for finplanner

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here, including every
policy constant used by the calculation engines (due-date windows,
budget thresholds, the amortization iteration cap). The engines keep
their own defaults so they stay pure functions; the controller passes
these values in explicitly.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Sheet names within the spreadsheet
    periods_sheet_name: str = Field(
        default="Periods",
        description="Name of the sheet holding budget periods"
    )
    state_sheet_name: str = Field(
        default="State",
        description="Name of the key/value sheet (current period id)"
    )
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for the advisory agent."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-2.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )


class PlanningSettings(BaseSettings):
    """
    Policy constants for the calculation engines.

    Defaults match the engines' own module constants.
    """

    model_config = SettingsConfigDict(
        env_prefix="PLANNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    upcoming_due_window_days: int = Field(
        default=7,
        ge=0,
        le=60,
        description="Bills/debts due within this many days raise an upcoming alert"
    )
    budget_warning_ratio: float = Field(
        default=0.8,
        gt=0.0,
        lt=1.0,
        description="Spent/budgeted ratio that triggers a budget warning"
    )
    anomaly_ratio: float = Field(
        default=1.2,
        gt=1.0,
        description="Current value above average x ratio is flagged as unusual"
    )
    anomaly_lookback_periods: int = Field(
        default=3,
        ge=1,
        description="How many past periods feed the trailing average"
    )
    anomaly_min_samples: int = Field(
        default=2,
        ge=1,
        description="Minimum past samples before an anomaly can fire"
    )
    amortization_max_months: int = Field(
        default=600,
        ge=1,
        description="Iteration cap for loan amortization"
    )
    payoff_tolerance: float = Field(
        default=0.1,
        ge=0.0,
        description="Remaining balance at or below which a loan counts as paid off"
    )
    projection_months: int = Field(
        default=60,
        ge=1,
        le=600,
        description="Horizon of the life-event scenario projection"
    )
    advisory_history_periods: int = Field(
        default=6,
        ge=1,
        description="How many recent periods are summarized for the AI advisor"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Persistence
    storage_backend: str = Field(
        default="local",
        pattern="^(memory|local|google_sheets)$",
        description="Where budget periods are persisted"
    )
    data_file: str = Field(
        default="finplanner_data.json",
        description="JSON file used by the local storage backend"
    )

    # Defaults for a fresh budget
    default_currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="Currency code for new budgets"
    )
    default_currency_symbol: str = Field(
        default="$",
        description="Currency symbol for new budgets"
    )

    @property
    def data_path(self) -> Path:
        """Get the local data file as a Path."""
        return Path(self.data_file).expanduser()


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

    @property
    def planning(self) -> PlanningSettings:
        return PlanningSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("google_sheets", "gemini", "planning", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
