"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "stockcore.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class InventorySettings(BaseSettings):
    """Stock mutation defaults."""

    model_config = SettingsConfigDict(env_prefix="INVENTORY_")

    default_costing_method: Literal["FIFO", "LIFO", "AVERAGE"] = "FIFO"
    bulk_batch_size: int = 50
    overstock_multiplier: int = 3

    # Seconds; None disables the deadline
    default_deadline_seconds: float | None = None


class ReorderSettings(BaseSettings):
    """Reorder monitor configuration."""

    model_config = SettingsConfigDict(env_prefix="REORDER_")

    enabled: bool = True
    throttle_seconds: int = 3600
    queue_size: int = 1000
    manager_roles: list[str] = ["admin", "manager"]


class MailSettings(BaseSettings):
    """SMTP mail sink configuration."""

    model_config = SettingsConfigDict(env_prefix="MAIL_")

    enabled: bool = False
    host: str = "localhost"
    port: int = 587
    username: str | None = None
    password: str | None = None
    use_tls: bool = True
    sender: str = "inventory@localhost"
    timeout: float = 10.0


class BroadcastSettings(BaseSettings):
    """WebSocket broadcast configuration."""

    model_config = SettingsConfigDict(env_prefix="BROADCAST_")

    enabled: bool = True
    send_timeout: float = 5.0


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Stockcore Inventory Service"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    inventory: InventorySettings = Field(default_factory=InventorySettings)
    reorder: ReorderSettings = Field(default_factory=ReorderSettings)
    mail: MailSettings = Field(default_factory=MailSettings)
    broadcast: BroadcastSettings = Field(default_factory=BroadcastSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
