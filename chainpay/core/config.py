from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables and .env file.

    This uses pydantic-settings so that we get type validation and defaults.
    Explorer settings are turned into a ClientConfig by
    ``ClientConfig.from_settings``.
    """

    ENV: Literal["development", "staging", "production"] = "development"
    """Environment mode: selects the log renderer."""

    LOG_LEVEL: str = "INFO"
    """Root log level."""

    # Explorer
    ETHERSCAN_API_KEYS: str = ""
    """Comma-separated API keys, rotated round-robin."""

    ETHERSCAN_NETWORK: str = "mainnet"
    """Network preset used when ETHERSCAN_BASE_URL is not set."""

    ETHERSCAN_BASE_URL: str = ""
    """Explicit API base URL; overrides ETHERSCAN_NETWORK."""

    ETHERSCAN_RATE_LIMIT: int = 5
    """Requests per second."""

    ETHERSCAN_TIMEOUT: float = 30.0
    """HTTP timeout in seconds."""

    ETHERSCAN_CACHE_TTL: int = 300
    """Response cache TTL in seconds (0 disables caching)."""

    ETHERSCAN_CACHE_MAX_SIZE: int = 1000
    """Maximum cached responses."""

    # Monitoring
    PAYMENT_POLL_INTERVAL: float = 10.0
    """Seconds between verification polls."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance to avoid re-parsing .env repeatedly."""
    return Settings()
