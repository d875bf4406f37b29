"""
Explorer client configuration.

Defines credentials, endpoint selection, rate limiting, timeouts and
caching parameters for the request pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from chainpay.errors import ConfigurationError

if TYPE_CHECKING:
    from chainpay.core.config import Settings


MAINNET_URL = "https://api.etherscan.io/api"

NETWORKS: dict[str, str] = {
    "mainnet": MAINNET_URL,
    "sepolia": "https://api-sepolia.etherscan.io/api",
    "bsc": "https://api.bscscan.com/api",
    "bsc-testnet": "https://api-testnet.bscscan.com/api",
}


class ClientConfig(BaseModel):
    """Configuration for the explorer request pipeline."""

    api_keys: list[str] = Field(
        default_factory=list, description="API keys, rotated round-robin"
    )
    base_url: str = Field(default=MAINNET_URL, description="Explorer API base URL")
    rate_limit_per_second: int = Field(
        default=5, description="Maximum outbound requests per second"
    )
    timeout_seconds: float = Field(
        default=30.0, gt=0, description="HTTP request timeout in seconds"
    )
    cache_ttl_seconds: int = Field(
        default=300, ge=0, description="Response cache TTL (0 disables caching)"
    )
    cache_max_size: int = Field(
        default=1000, ge=1, description="Maximum cached responses"
    )

    @classmethod
    def for_network(cls, api_key: str, network: str = "mainnet") -> "ClientConfig":
        """Create a single-key configuration for a known network."""
        try:
            base_url = NETWORKS[network]
        except KeyError:
            raise ConfigurationError(
                f"Unknown network '{network}'. Known: {', '.join(sorted(NETWORKS))}"
            ) from None
        return cls(api_keys=[api_key], base_url=base_url)

    @classmethod
    def testnet(cls, api_key: str) -> "ClientConfig":
        return cls.for_network(api_key, "sepolia")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClientConfig":
        """Build client configuration from application settings."""
        keys = [k.strip() for k in settings.ETHERSCAN_API_KEYS.split(",") if k.strip()]
        if settings.ETHERSCAN_BASE_URL:
            base_url = settings.ETHERSCAN_BASE_URL
        else:
            base_url = NETWORKS.get(settings.ETHERSCAN_NETWORK, "")
            if not base_url:
                raise ConfigurationError(
                    f"Unknown network '{settings.ETHERSCAN_NETWORK}'"
                )

        config = cls(
            api_keys=keys,
            base_url=base_url,
            rate_limit_per_second=settings.ETHERSCAN_RATE_LIMIT,
            timeout_seconds=settings.ETHERSCAN_TIMEOUT,
            cache_ttl_seconds=settings.ETHERSCAN_CACHE_TTL,
            cache_max_size=settings.ETHERSCAN_CACHE_MAX_SIZE,
        )
        config.validate_config()
        return config

    @property
    def cache_enabled(self) -> bool:
        return self.cache_ttl_seconds > 0

    def validate_config(self) -> None:
        """Validate the configuration.

        Raises:
            ConfigurationError: If no key is configured, a key is empty,
                the base URL is empty or the rate limit is not positive
        """
        if not self.api_keys:
            raise ConfigurationError("At least one API key required")
        if any(not key for key in self.api_keys):
            raise ConfigurationError("API key cannot be empty")
        if not self.base_url:
            raise ConfigurationError("Base URL cannot be empty")
        if self.rate_limit_per_second <= 0:
            raise ConfigurationError("Rate limit must be greater than 0")
