"""
Configuration Management for the Payment Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The bootstrap admin account, the user file and the default category
labels are explicit settings rather than values baked into the engine.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AdminSettings(BaseSettings):
    """Credentials of the account seeded when no users exist."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_ADMIN_",
        extra="ignore"
    )

    username: str = Field(
        default="admin",
        min_length=1,
        description="Bootstrap admin username"
    )
    password: SecretStr = Field(
        default=SecretStr("admin"),
        description="Bootstrap admin password"
    )


class StorageSettings(BaseSettings):
    """User persistence configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        extra="ignore"
    )

    users_file: Optional[Path] = Field(
        default=None,
        description="JSON file holding user accounts. In-memory if unset."
    )
    write_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for a user file write before giving up"
    )

    @field_validator("users_file")
    @classmethod
    def validate_users_file(cls, v: Optional[Path]) -> Optional[Path]:
        """Warn if the parent directory is missing (it may be created later)."""
        if v is not None and not v.parent.exists():
            import warnings
            warnings.warn(
                f"Directory for users file not found: {v.parent}. "
                "Make sure it exists before the ledger saves users."
            )
        return v


class CategorySettings(BaseSettings):
    """Default labels of the three categories."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_CATEGORIES_",
        extra="ignore"
    )

    bank_name: str = "Bank"
    company_name: str = "Company"
    business_group_name: str = "Business Group"

    banks: list[str] = Field(
        default_factory=lambda: [
            "Halk Bankası",
            "Halk Bankası Hamiline",
            "Ziraat Bankası",
            "Ziraat Bankası Hamiline",
            "Deniz Bank",
        ],
        description="Default bank labels"
    )
    companies: list[str] = Field(
        default_factory=lambda: [
            "DOĞU İNŞAAT",
            "DOĞU İNŞAAT HAMİLİNE",
            "ALTAY",
            "ALTAY HAMİLİNE",
            "ONURAY İNŞAAT",
        ],
        description="Default company labels"
    )
    business_groups: list[str] = Field(
        default_factory=lambda: [
            "KULU",
            "CİHANBEYLİ",
            "AKHİSAR",
            "AKSARAY",
            "ESENYURT",
            "SHİFA",
            "KONYA OKUL",
            "OKUL ONARIM",
            "HATIR ÇEKİ",
            "DİĞER",
        ],
        description="Default business group labels"
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
        description="Minimum level for local structured logs"
    )

    # Category membership
    strict_categories: bool = Field(
        default=False,
        description=(
            "Reject payments whose bank, company or business group "
            "is not a label of the corresponding category"
        )
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


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
    def admin(self) -> AdminSettings:
        return AdminSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def categories(self) -> CategorySettings:
        return CategorySettings()

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

    Returns a dict of {setting_name: is_valid}, plus `<name>_error`
    entries for the ones that failed. Useful for startup checks.
    """
    results = {}
    settings = get_settings()

    for name in ("admin", "storage", "categories", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
