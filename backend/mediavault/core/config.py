"""
Application configuration and settings management.
"""

from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApplyStudioLabels(str, Enum):
    """Events on which a studio's labels are pushed onto its scenes."""

    STUDIO_CREATE = "event:studio:create"
    STUDIO_UPDATE = "event:studio:update"
    STUDIO_FIND_UNMATCHED_SCENES = "event:studio:find-unmatched-scenes"


class AppSettings(BaseSettings):
    """Application-specific settings."""

    name: str = Field("MediaVault", description="Application name")
    version: str = Field("0.1.0", description="Application version")
    debug: bool = Field(False, description="Debug mode")
    environment: str = Field(
        "production", description="Environment (development, staging, production)"
    )
    run_migrations: bool = Field(
        True, description="Apply database migrations on startup"
    )

    model_config = SettingsConfigDict(env_prefix="APP_")


class DatabaseSettings(BaseSettings):
    """Database configuration settings."""

    url: str = Field("sqlite:///./mediavault.db", description="Database connection URL")
    echo: bool = Field(False, description="Echo SQL statements")
    pool_size: int = Field(10, description="Connection pool size")
    pool_recycle: int = Field(
        3600, description="Connection pool recycle time in seconds"
    )

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    @field_validator("url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Ensure database URL is properly formatted."""
        if not v:
            raise ValueError("Database URL cannot be empty")
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    level: str = Field("INFO", description="Logging level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s", description="Log format"
    )
    json_logs: bool = Field(False, description="Use JSON logging format")

    model_config = SettingsConfigDict(env_prefix="LOGGING_")


class MatchingSettings(BaseSettings):
    """Scene matching and label propagation settings."""

    apply_studio_labels: List[ApplyStudioLabels] = Field(
        default_factory=lambda: [
            ApplyStudioLabels.STUDIO_CREATE,
            ApplyStudioLabels.STUDIO_UPDATE,
            ApplyStudioLabels.STUDIO_FIND_UNMATCHED_SCENES,
        ],
        description="Events on which studio labels are pushed to scenes",
    )
    ignore_single_names: bool = Field(
        False, description="Never match studios whose name is a single word"
    )

    model_config = SettingsConfigDict(env_prefix="MATCHING_")

    def applies_on(self, event: ApplyStudioLabels) -> bool:
        """Check whether labels are pushed for the given event."""
        return event in self.apply_studio_labels


class PluginRegistration(BaseModel):
    """A plugin callable and the arguments passed to it."""

    path: str = Field(..., description="Import path in 'package.module:callable' form")
    args: Dict[str, Any] = Field(default_factory=dict, description="Plugin arguments")


class PluginSettings(BaseSettings):
    """Studio plugin configuration settings."""

    registry: Dict[str, PluginRegistration] = Field(
        default_factory=dict, description="Plugins by name"
    )
    events: Dict[str, List[str]] = Field(
        default_factory=dict, description="Plugin names to run per event"
    )
    create_missing_labels: bool = Field(
        False, description="Create labels returned by plugins that do not exist yet"
    )

    model_config = SettingsConfigDict(env_prefix="PLUGINS_")


class SearchSettings(BaseSettings):
    """Search index settings."""

    max_results: int = Field(50, description="Maximum number of search results")

    model_config = SettingsConfigDict(env_prefix="SEARCH_")


class Settings(BaseSettings):
    """Main settings class combining all configuration sections."""

    # Sub-settings
    app: AppSettings = Field(default_factory=lambda: AppSettings())  # type: ignore[call-arg]
    database: DatabaseSettings = Field(default_factory=lambda: DatabaseSettings())  # type: ignore[call-arg]
    logging: LoggingSettings = Field(default_factory=lambda: LoggingSettings())  # type: ignore[call-arg]
    matching: MatchingSettings = Field(default_factory=lambda: MatchingSettings())  # type: ignore[call-arg]
    plugins: PluginSettings = Field(default_factory=lambda: PluginSettings())  # type: ignore[call-arg]
    search: SearchSettings = Field(default_factory=lambda: SearchSettings())  # type: ignore[call-arg]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()

