"""Configuration package."""

from budgetup.config.settings import (
    AppSettings,
    CurrencySettings,
    Settings,
    StoreSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "CurrencySettings",
    "Settings",
    "StoreSettings",
    "get_settings",
]
