"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables (and an optional .env file)
with validation, type coercion, and sensible defaults.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SteamAPIConfig(BaseSettings):
    """Steam catalog endpoints and per-call timeouts."""

    model_config = SettingsConfigDict(env_prefix="STEAM_")

    store_url: str = Field(
        default="https://store.steampowered.com/api",
        description="Base URL for the Steam Store API (appdetails)",
    )
    reviews_url: str = Field(
        default="https://store.steampowered.com",
        description="Base URL for the Steam reviews endpoint (appreviews)",
    )
    search_url: str = Field(
        default="https://steamcommunity.com/actions/SearchApps",
        description="Steam community fuzzy app search endpoint",
    )
    timeout_seconds: float = Field(
        default=10.0,
        ge=1,
        le=120,
        description="Timeout for search, details and reviews calls",
    )
    image_timeout_seconds: float = Field(
        default=30.0,
        ge=1,
        le=300,
        description="Timeout for a single image download",
    )
    user_agent: str = Field(
        default="GameVault/0.1",
        description="User-Agent header sent with every request",
    )


class LibraryConfig(BaseSettings):
    """Paths for the game library, database and per-folder data."""

    model_config = SettingsConfigDict(env_prefix="GAMEVAULT_")

    game_library: Path = Field(
        default=Path("."),
        description="Root directory containing one folder per game",
    )
    database_url: str = Field(
        default="sqlite:///./data/gamevault.db",
        description="SQLAlchemy database URL for the authoritative store",
    )
    sidecar_dir_name: str = Field(
        default=".gamevault",
        description="Private subdirectory created inside each game folder",
    )

    @field_validator("sidecar_dir_name")
    @classmethod
    def validate_dir_name(cls, v: str) -> str:
        """Reject names that would escape the game folder."""
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Invalid sidecar directory name: {v!r}")
        return v


class EnrichmentConfig(BaseSettings):
    """Enrichment batch behaviour."""

    model_config = SettingsConfigDict(env_prefix="ENRICH_")

    batch_size: int = Field(
        default=20,
        ge=1,
        le=200,
        description="Maximum entries processed per enrichment run",
    )
    request_delay_seconds: float = Field(
        default=0.5,
        ge=0.0,
        le=30.0,
        description="Fixed pause between catalog calls for one entry",
    )
    alias_threshold: float = Field(
        default=0.85,
        ge=0.0,
        le=1.0,
        description="Minimum similarity for an alias table hit",
    )
    search_threshold: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Minimum similarity for a remote search hit",
    )
    max_search_candidates: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of remote search results scored per title",
    )
    export_sidecars: bool = Field(
        default=True,
        description="Write the sidecar file after a successful enrichment",
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    include_timestamp: bool = Field(
        default=True,
        description="Include timestamp in log entries",
    )


class Settings(BaseSettings):
    """
    Main application settings.

    Aggregates all configuration sections and provides
    a single entry point for configuration access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )

    steam: SteamAPIConfig = Field(default_factory=SteamAPIConfig)
    library: LibraryConfig = Field(default_factory=LibraryConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are loaded once and reused across the application;
    call ``get_settings.cache_clear()`` after changing the environment.

    Returns:
        Settings: Application configuration instance
    """
    return Settings()
