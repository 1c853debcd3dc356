# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration management for the registrar
core. Settings are loaded from environment variables with sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from registrar.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.store.backend)
    'memory'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    """Document store configuration.

    The registrar data lives in a schemaless, multi-collection document
    store. Production deployments use Firestore; the in-memory backend is
    meant for local development and tests.

    Attributes:
        backend: Which store implementation to open.
        project_id: Google Cloud project id (Firestore only).
        database: Firestore database id.
        emulator_host: Optional Firestore emulator address (host:port).
        timeout: Per-call timeout in seconds passed to the Firestore client.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        extra="ignore",
    )

    backend: Literal["memory", "firestore"] = "memory"
    project_id: str | None = None
    database: str = "(default)"
    emulator_host: str | None = None
    timeout: float = 30.0


class RegistrarSettings(BaseSettings):
    """Registrar defaults used when the system config document is unusable.

    Attributes:
        default_ay_code: Academic-year code used when config/system is absent
            or holds a malformed AY value.
        default_semester: Semester used when config/system has none.
        config_collection: Collection holding the singleton config document.
        config_document: Id of the singleton config document.
    """

    model_config = SettingsConfigDict(
        env_prefix="REGISTRAR_",
        extra="ignore",
    )

    default_ay_code: str = Field(default="AY2526", pattern=r"^AY\d{4}$")
    default_semester: Literal["1", "2"] = "1"
    config_collection: str = "config"
    config_document: str = "system"

    @property
    def config_path(self) -> str:
        """Build the document path of the system config record."""
        return f"{self.config_collection}/{self.config_document}"


class APISettings(BaseSettings):
    """API server configuration.

    Attributes:
        host: Host to bind to.
        port: Port to listen on.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all subsettings and provides environment-level configuration.

    Attributes:
        environment: Deployment environment.
        debug: Enable debug mode.
        log_level: Logging level.
        store: Document store settings.
        registrar: Registrar defaults.
        api: API server settings.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    store: StoreSettings = Field(default_factory=StoreSettings)
    registrar: RegistrarSettings = Field(default_factory=RegistrarSettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production on the in-memory store.
        """
        if self.environment == "production" and self.store.backend == "memory":
            raise ValueError(
                "The in-memory document store cannot be used in production. "
                "Set STORE_BACKEND=firestore."
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
