"""Configuration package."""

from payment_ledger.config.settings import (
    AdminSettings,
    AppSettings,
    CategorySettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AdminSettings",
    "AppSettings",
    "CategorySettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
