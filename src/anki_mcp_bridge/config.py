"""Configuration management using Pydantic settings."""

import logging
import sys
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RemoteConfig(BaseModel):
    """Immutable connection settings for one AnkiConnect endpoint."""

    model_config = ConfigDict(frozen=True)

    url: str = "http://localhost:8765"
    version: int = 6
    timeout: float = Field(default=5.0, gt=0, description="Per-attempt deadline in seconds")
    retry_timeout: float = Field(
        default=10.0, ge=0, description="Upper bound for a single backoff delay in seconds"
    )
    max_retries: int = Field(default=1, description="Retries after the first attempt")
    default_deck: str = "Default"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ANKI_MCP_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # AnkiConnect API
    anki_connect_url: str = Field(
        default="http://localhost:8765", description="AnkiConnect API endpoint"
    )
    anki_connect_version: int = Field(default=6, description="AnkiConnect API version")

    # Request behavior
    request_timeout: float = Field(default=5.0, gt=0, description="Request timeout in seconds")
    retry_timeout: float = Field(
        default=10.0, ge=0, description="Maximum backoff between retries in seconds"
    )
    max_retries: int = Field(default=1, ge=0, description="Retries after a failed request")

    # Default behavior
    default_deck: str = Field(default="Default", description="Default deck for new notes")

    # Note type schema cache
    schema_cache_ttl: float = Field(
        default=300.0, gt=0, description="Seconds before cached note type schemas go stale"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Log level for the stderr handler"
    )

    def remote_config(self) -> RemoteConfig:
        """Build the immutable client configuration from these settings."""
        return RemoteConfig(
            url=self.anki_connect_url,
            version=self.anki_connect_version,
            timeout=self.request_timeout,
            retry_timeout=self.retry_timeout,
            max_retries=self.max_retries,
            default_deck=self.default_deck,
        )


@lru_cache
def get_settings() -> Settings:
    """Get the settings loaded from the environment.

    Returns:
        Cached Settings instance
    """
    return Settings()


def setup_logging(level: str = "INFO") -> None:
    """Send log records to stderr.

    stdout carries the MCP stdio stream, so nothing may be logged there.

    Args:
        level: Root log level name
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
