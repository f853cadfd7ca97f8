"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The currency allow-list is configuration data, not something the
validator hard-codes, so it lives here and is handed to the validator
and the store by the composition root.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CURRENCIES = "HUF,USD,EUR,GBP"


class StorageSettings(BaseSettings):
    """Durable storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSES_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="json_file",
        pattern="^(json_file|memory)$",
        description="Storage backend: 'json_file' for disk, 'memory' for ephemeral"
    )
    data_dir: str = Field(
        default=str(Path.home() / ".expense_tracker"),
        description="Directory holding one JSON file per storage key"
    )
    key: str = Field(
        default="expenses",
        min_length=1,
        description="Storage key the expense collection is kept under"
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failing disk write is attempted"
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

    # Currencies
    supported_currencies: str = Field(
        default=DEFAULT_CURRENCIES,
        description="Comma-separated, ordered list of allowed currency codes"
    )
    default_currency: str = Field(
        default="",
        description="Currency shown when nothing else applies (first allowed if empty)"
    )

    # Audit
    audit_history_size: int = Field(
        default=500,
        ge=0,
        description="How many audit events are kept in memory"
    )

    @field_validator('supported_currencies')
    @classmethod
    def validate_supported_currencies(cls, v: str) -> str:
        """At least one currency code must be configured."""
        if not [code for code in v.split(",") if code.strip()]:
            raise ValueError("At least one supported currency is required")
        return v

    @property
    def currency_list(self) -> list[str]:
        """Get supported currencies as an ordered list of upper-case codes."""
        codes = []
        for code in self.supported_currencies.split(","):
            code = code.strip().upper()
            if code and code not in codes:
                codes.append(code)
        return codes

    @property
    def fallback_currency(self) -> str:
        """Default currency, falling back to the first allowed one."""
        return self.default_currency.strip().upper() or self.currency_list[0]


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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus an
    "<name>_error" entry for every section that failed.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
