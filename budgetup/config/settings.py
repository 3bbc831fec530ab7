"""
Configuration Management for BudgetUp

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Cache sizes, TTLs, the pivot currency and the storage location are
tunable without touching the components that use them.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CurrencySettings(BaseSettings):
    """Conversion, caching and formatting configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGETUP_CURRENCY_",
        extra="ignore"
    )

    default_currency: str = Field(
        default="USD",
        description="Currency used when no user preference exists"
    )
    pivot_currency: str = Field(
        default="USD",
        description="Reference currency for indirect (two-hop) rates"
    )
    default_locale: str = Field(
        default="en-US",
        description="Locale used to render monetary strings"
    )

    # Cache behaviour
    cache_ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Lifetime of a cached rate or formatted string"
    )
    cache_max_size: int = Field(
        default=1000,
        ge=1,
        description="Maximum entries per cache"
    )
    cache_eviction_fraction: float = Field(
        default=0.1,
        gt=0.0,
        le=1.0,
        description="Share of oldest entries dropped when a cache is full"
    )
    sweep_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="How often expired entries are swept from both caches"
    )
    preload_currencies: str = Field(
        default="USD,EUR,GBP,GHS,NGN",
        description="Comma-separated currencies to warm the rate cache with"
    )

    @field_validator("default_currency", "pivot_currency")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        """Currency codes are stored upper-case."""
        return v.strip().upper()

    @property
    def preload_currencies_list(self) -> list[str]:
        """Get preload currencies as a list."""
        return [
            code.strip().upper()
            for code in self.preload_currencies.split(",")
            if code.strip()
        ]


class StoreSettings(BaseSettings):
    """Persisted financial store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGETUP_STORE_",
        extra="ignore"
    )

    data_dir: str = Field(
        default="./data",
        description="Directory holding persisted blobs"
    )
    storage_key: str = Field(
        default="budgetup-financial-store",
        description="Logical key of the financial store blob"
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

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for budgetup loggers"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.strip().upper()


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
    def currency(self) -> CurrencySettings:
        return CurrencySettings()

    @property
    def store(self) -> StoreSettings:
        return StoreSettings()

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
