"""Registry configuration using pydantic-settings."""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("config")


class Settings(BaseSettings):
    """Registry settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: Literal["development", "staging", "production"] = "development"

    # ==========================================================================
    # Logging
    # ==========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_debug_namespaces: str = Field(
        default="",
        description="Comma-separated list of namespaces to enable debug logging",
    )
    log_context_payloads: bool = Field(
        default=False,
        description="Include the context payload in dispatch log records",
    )

    # ==========================================================================
    # Events
    # ==========================================================================
    event_sink: Literal["noop", "logging"] = Field(
        default="noop",
        description=(
            "Default sink for registry events when none is set on the current context: "
            "'noop' = drop events, 'logging' = write events to the 'events' logger"
        ),
    )

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @computed_field
    @property
    def debug_namespaces(self) -> list[str]:
        """Parse debug namespaces into a list."""
        if not self.log_debug_namespaces:
            return []
        return [ns.strip() for ns in self.log_debug_namespaces.split(",") if ns.strip()]

    def log_config_summary(self) -> None:
        """Log a summary of the configuration."""
        logger.info(
            "Registry configuration loaded",
            extra={
                "service": "config",
                "environment": self.environment,
                "log_level": self.log_level,
                "debug_namespaces": self.debug_namespaces,
                "log_context_payloads": self.log_context_payloads,
                "event_sink": self.event_sink,
            },
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
