"""
Catalog Admin Core
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Remote REST backend configuration"""

    model_config = SettingsConfigDict(env_prefix="ADMIN_API_")

    base_url: str = Field(default="http://localhost:5000", description="Backend base URL")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    login_path: str = Field(default="/auth/admin/login", description="Login endpoint path")
    logout_path: str = Field(default="/auth/admin/logout", description="Logout endpoint path")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL"""
        return v.rstrip("/")


class AuthSettings(BaseSettings):
    """Credential persistence configuration"""

    model_config = SettingsConfigDict(env_prefix="ADMIN_AUTH_")

    credentials_path: Path = Field(
        default=Path.home() / ".catalog_admin" / "credentials.json",
        description="File holding the persisted admin token and user",
    )


class CatalogSettings(BaseSettings):
    """Catalog rules and variant composition configuration"""

    model_config = SettingsConfigDict(env_prefix="CATALOG_")

    name_max_length: int = Field(default=100, description="Max product name length")
    description_max_length: int = Field(default=500, description="Max product description length")

    # Attribute names that feed SKU derivation, matched case-insensitively
    size_attribute_names: List[str] = Field(default=["size"], description="Size axis attribute names")
    color_attribute_names: List[str] = Field(
        default=["color", "colour"],
        description="Color axis attribute names",
    )

    sku_qualify_with_id: bool = Field(
        default=False,
        description="Append the server-assigned product id to the SKU root",
    )
    reject_concurrent_mutations: bool = Field(
        default=False,
        description="Refuse a mutation while another one on the same id is in flight",
    )
    low_stock_threshold: int = Field(default=10, description="Stock level reported as low")


class MonitoringSettings(BaseSettings):
    """Monitoring and Observability Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")
    log_file: Optional[str] = Field(default=None, description="Log file path")

    metrics_enabled: bool = Field(default=True, description="Record Prometheus metrics")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="catalog-admin", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    api: ApiSettings = Field(default_factory=ApiSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
