"""
Configuration Management
========================

Centralized configuration using Pydantic Settings.
Loads from environment variables and .env file.

The resolved settings are treated as read-only input by the rest of the
harness: providers read connection parameters once at construction and
the broker/fixture layer only reads the backend name and base URLs.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Shared config that all settings classes use to load .env
_shared_config = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    env_prefix="",
    extra="ignore",
)


class ProviderSettings(BaseSettings):
    """Device provider configuration (local grid and cloud device farms)."""

    model_config = _shared_config

    device_provider: str = Field(
        default="local",
        description="Backend name: local, browserstack, saucelabs (alias: sauce)",
    )

    # Local Appium grid
    local_appium_host: str = Field(default="localhost", description="Local Appium host")
    local_appium_port: int = Field(default=4723, description="Local Appium port")
    local_appium_path: str = Field(default="/wd/hub", description="Local Appium base path")

    # BrowserStack App Automate
    browserstack_username: str = Field(default="", description="BrowserStack username")
    browserstack_access_key: str = Field(default="", description="BrowserStack access key")
    browserstack_region: str = Field(
        default="",
        description="Optional BrowserStack hub region prefix (empty = global hub)",
    )
    browserstack_local: bool = Field(default=False, description="Route traffic through BrowserStack Local")
    browserstack_local_identifier: str = Field(
        default="harness-local",
        description="Identifier of the BrowserStack Local tunnel",
    )
    browserstack_local_binary: str = Field(
        default="",
        description="Path to the BrowserStackLocal binary (empty = tunnel managed externally)",
    )

    # Sauce Labs
    sauce_username: str = Field(default="", description="Sauce Labs username")
    sauce_access_key: str = Field(default="", description="Sauce Labs access key")
    sauce_region: str = Field(default="us-west-1", description="Sauce Labs data center region")
    sauce_connect: bool = Field(default=False, description="Route traffic through Sauce Connect")
    sauce_tunnel_identifier: str = Field(default="", description="Sauce Connect tunnel name")
    sauce_connect_binary: str = Field(
        default="",
        description="Path to the Sauce Connect binary (empty = tunnel managed externally)",
    )

    # Shared session defaults
    build_name: str = Field(default="harness-build", description="Build name reported to cloud dashboards")
    appium_version: str = Field(default="2.0.0", description="Appium version pinned on cloud backends")
    session_timeout: float = Field(
        default=120.0,
        description="HTTP timeout in seconds for WebDriver session calls",
    )

    @field_validator("device_provider")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        """Provider names are case-insensitive."""
        return (v or "local").strip().lower()

    @field_validator("local_appium_path")
    @classmethod
    def normalize_path(cls, v: str) -> str:
        """Ensure the Appium path starts with a slash."""
        v = v.strip() or "/"
        return v if v.startswith("/") else f"/{v}"


class EnvironmentSettings(BaseSettings):
    """Target environment configuration."""

    model_config = _shared_config

    test_environment: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Active environment profile",
    )
    base_url: str = Field(default="http://localhost:3000", description="Web application base URL")
    api_url: str = Field(default="http://localhost:3001", description="API base URL")
    api_timeout: float = Field(default=30.0, description="HTTP timeout in seconds for API calls")


class LogSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = _shared_config

    debug: bool = Field(default=True, description="Debug mode (console rendering)")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )


class Settings(BaseSettings):
    """
    Main settings class combining all configuration sections.

    Usage:
        from harness.config import get_settings
        settings = get_settings()
        print(settings.provider.device_provider)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Nested settings
    provider: ProviderSettings = Field(default_factory=ProviderSettings)
    environment: EnvironmentSettings = Field(default_factory=EnvironmentSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    def __init__(
        self,
        provider: Optional[ProviderSettings] = None,
        environment: Optional[EnvironmentSettings] = None,
        log: Optional[LogSettings] = None,
        **kwargs,
    ):
        """Initialize settings, re-reading nested sections from the environment."""
        super().__init__(**kwargs)
        # Re-initialize nested settings to pick up env vars
        self.provider = provider or ProviderSettings()
        self.environment = environment or EnvironmentSettings()
        self.log = log or LogSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Harness settings loaded from environment.
    """
    return Settings()
