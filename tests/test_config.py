"""
Tests for configuration: client config validation, settings loading and
component configs.
"""

import logging
from decimal import Decimal

import pytest
import structlog
from pydantic import ValidationError

from chainpay.core.config import Settings
from chainpay.core.logging import configure_logging
from chainpay.errors import ConfigurationError
from chainpay.explorer.client import ExplorerClient
from chainpay.explorer.config import MAINNET_URL, NETWORKS, ClientConfig
from chainpay.explorer.pipeline import RequestPipeline
from chainpay.payments.config import MonitorConfig, VerificationConfig
from chainpay.payments.monitor import PaymentMonitor


class TestClientConfig:
    """Tests for ClientConfig validation and presets."""

    def test_defaults(self):
        config = ClientConfig(api_keys=["k"])

        assert config.base_url == MAINNET_URL
        assert config.rate_limit_per_second == 5
        assert config.timeout_seconds == 30.0
        assert config.cache_ttl_seconds == 300
        assert config.cache_max_size == 1000
        assert config.cache_enabled
        config.validate_config()

    def test_no_keys(self):
        with pytest.raises(ConfigurationError):
            ClientConfig().validate_config()

    def test_empty_key(self):
        with pytest.raises(ConfigurationError):
            ClientConfig(api_keys=["k1", ""]).validate_config()

    def test_empty_base_url(self):
        with pytest.raises(ConfigurationError):
            ClientConfig(api_keys=["k"], base_url="").validate_config()

    def test_zero_rate_limit(self):
        with pytest.raises(ConfigurationError):
            ClientConfig(api_keys=["k"], rate_limit_per_second=0).validate_config()

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            ClientConfig().validate_config()

    def test_pipeline_validates_eagerly(self):
        with pytest.raises(ConfigurationError):
            RequestPipeline(ClientConfig(api_keys=[]))

    def test_network_presets(self):
        assert ClientConfig.testnet("k").base_url == NETWORKS["sepolia"]
        assert ClientConfig.for_network("k", "bsc").base_url == NETWORKS["bsc"]

    def test_unknown_network(self):
        with pytest.raises(ConfigurationError):
            ClientConfig.for_network("k", "moonbase")

    def test_monitor_from_settings(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_POLL_INTERVAL", "2.5")

        config = MonitorConfig.from_settings(Settings(_env_file=None))

        assert config.poll_interval_seconds == 2.5

    def test_from_api_key(self):
        client = ExplorerClient.from_api_key("k", "sepolia")
        assert client.config.base_url == NETWORKS["sepolia"]
        assert client.config.api_keys == ["k"]


class TestSettings:
    """Tests for environment-driven settings."""

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("ETHERSCAN_API_KEYS", "k1, k2,,k3")
        monkeypatch.setenv("ETHERSCAN_NETWORK", "sepolia")
        monkeypatch.setenv("ETHERSCAN_RATE_LIMIT", "3")
        monkeypatch.setenv("ETHERSCAN_CACHE_TTL", "0")
        monkeypatch.delenv("ETHERSCAN_BASE_URL", raising=False)

        config = ClientConfig.from_settings(Settings(_env_file=None))

        assert config.api_keys == ["k1", "k2", "k3"]
        assert config.base_url == NETWORKS["sepolia"]
        assert config.rate_limit_per_second == 3
        assert not config.cache_enabled

    def test_base_url_overrides_network(self, monkeypatch):
        monkeypatch.delenv("ETHERSCAN_NETWORK", raising=False)
        monkeypatch.setenv("ETHERSCAN_API_KEYS", "k1")
        monkeypatch.setenv("ETHERSCAN_BASE_URL", "https://explorer.internal/api")

        config = ClientConfig.from_settings(Settings(_env_file=None))

        assert config.base_url == "https://explorer.internal/api"

    def test_missing_keys(self, monkeypatch):
        monkeypatch.delenv("ETHERSCAN_API_KEYS", raising=False)

        with pytest.raises(ConfigurationError):
            ClientConfig.from_settings(Settings(_env_file=None))

    def test_client_and_monitor_from_settings(self, monkeypatch):
        monkeypatch.setenv("ETHERSCAN_API_KEYS", "k1,k2")
        monkeypatch.setenv("PAYMENT_POLL_INTERVAL", "30")
        monkeypatch.delenv("ETHERSCAN_BASE_URL", raising=False)
        monkeypatch.delenv("ETHERSCAN_NETWORK", raising=False)
        settings = Settings(_env_file=None)

        client = ExplorerClient.from_settings(settings)
        monitor = PaymentMonitor.from_settings(client, settings)

        assert len(client.pipeline.keys) == 2
        assert monitor.config.poll_interval_seconds == 30.0
        assert monitor.verifier.client is client

    def test_unknown_network(self, monkeypatch):
        monkeypatch.setenv("ETHERSCAN_API_KEYS", "k1")
        monkeypatch.setenv("ETHERSCAN_NETWORK", "nowhere")
        monkeypatch.delenv("ETHERSCAN_BASE_URL", raising=False)

        with pytest.raises(ConfigurationError):
            ClientConfig.from_settings(Settings(_env_file=None))


class TestComponentConfig:
    """Tests for verification and monitor configuration."""

    def test_verification_defaults(self):
        config = VerificationConfig()

        assert config.match_min_percent == Decimal("99.9")
        assert config.accept_min_percent == Decimal("99.95")
        assert config.page_size == 100

    def test_acceptance_cannot_be_looser_than_matching(self):
        with pytest.raises(ValidationError):
            VerificationConfig(
                match_min_percent=Decimal(99), accept_min_percent=Decimal(98)
            )

    def test_monitor_defaults(self):
        config = MonitorConfig()

        assert config.poll_interval_seconds == 10.0
        assert config.enforce_timeout

    def test_monitor_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            MonitorConfig(poll_interval_seconds=0)


class TestLogging:
    """Tests for logging setup."""

    @pytest.fixture(autouse=True)
    def reset_logging(self):
        root_level = logging.getLogger().level
        yield
        structlog.reset_defaults()
        logging.getLogger().setLevel(root_level)

    @pytest.mark.parametrize("env", ["development", "production"])
    def test_configure_logging(self, env):
        configure_logging(env=env, level="DEBUG")

    def test_configure_from_settings(self, monkeypatch):
        monkeypatch.setenv("ENV", "production")
        monkeypatch.setenv("LOG_LEVEL", "warning")
        settings = Settings(_env_file=None)

        configure_logging(settings.ENV, settings.LOG_LEVEL)

        assert logging.getLogger().level == logging.WARNING
