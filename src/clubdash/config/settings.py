"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_default_data_dir() -> Path:
    """Return the default data directory."""
    return Path.home() / ".clubdash"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CLUBDASH_",
    )

    app_name: str = "Club Dashboard"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # Data directory (SQLite database lives here)
    data_dir: Optional[Path] = None

    # Database URL (derived from data_dir if not set explicitly)
    database_url: Optional[str] = None

    # Local timezone for "today", birthdays and upcoming events
    timezone: str = "Asia/Kuala_Lumpur"

    # Cache settings
    cache_default_ttl_seconds: float = Field(default=300.0, gt=0)
    cache_ttls: dict[str, float] = Field(default_factory=dict)
    cache_single_flight: bool = True

    # Loader tier delays in seconds, keyed by tier name (e.g. {"LOW": 5})
    tier_delays: dict[str, float] = Field(default_factory=dict)

    # Milliseconds a SQLite connection waits on a locked database
    sqlite_busy_timeout_ms: int = Field(default=5000, ge=0)

    # Level for the cache and loader loggers (hit/miss chatter); None follows log_level
    cache_log_level: Optional[str] = None

    # Dashboard
    birthday_window_days: int = Field(default=30, ge=1)

    def get_data_dir(self) -> Path:
        """Get the data directory, creating it if needed."""
        data_dir = self.data_dir or get_default_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def get_database_url(self) -> str:
        """Get database URL, deriving from data_dir if not set."""
        if self.database_url:
            return self.database_url
        db_path = self.get_data_dir() / "clubdash.db"
        return f"sqlite:///{db_path}"


# Global settings instance (can be replaced at runtime)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the current settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def set_settings(settings: Settings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Reset settings to force reload."""
    global _settings
    _settings = None
