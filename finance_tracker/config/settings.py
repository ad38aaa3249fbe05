"""
Configuration Management for Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets document store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
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

    # One worksheet per collection
    categories_sheet_name: str = Field(default="Categories")
    transactions_sheet_name: str = Field(default="Transactions")
    todos_sheet_name: str = Field(default="Todos")
    users_sheet_name: str = Field(default="Users")
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

    def sheet_name_for(self, collection: str) -> str:
        """Map a collection name to its worksheet title."""
        mapping = {
            "categories": self.categories_sheet_name,
            "transactions": self.transactions_sheet_name,
            "todos": self.todos_sheet_name,
            "users": self.users_sheet_name,
            "audit_log": self.audit_sheet_name,
        }
        try:
            return mapping[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}")


class AuthSettings(BaseSettings):
    """Identity provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    session_ttl_minutes: int = Field(
        default=60,
        ge=1,
        le=60 * 24 * 30,
        description="How long a sign-in session stays valid"
    )
    min_password_length: int = Field(
        default=6,
        ge=4,
        le=128,
        description="Minimum accepted password length"
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
    storage_backend: str = Field(
        default="google_sheets",
        pattern="^(google_sheets|memory)$",
        description="Which document store backs the app"
    )

    # Listing and reports
    default_page_size: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Transactions per page on the recent list"
    )
    breakdown_top_n: int = Field(
        default=6,
        ge=1,
        le=50,
        description="How many categories a breakdown chart shows"
    )
    report_years_back: int = Field(
        default=5,
        ge=1,
        le=50,
        description="How many years the report year selector offers"
    )
    currency_symbol: str = Field(default="$")

    # Category rules
    category_name_min_length: int = Field(default=2, ge=1)
    category_name_max_length: int = Field(default=50, ge=2)


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

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

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

    for name in ("google_sheets", "auth", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
