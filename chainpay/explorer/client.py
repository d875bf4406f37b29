"""
Explorer API client.

Maps each supported endpoint onto the shared request pipeline. The
methods here only build query parameters and pick the result type.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from types import TracebackType
from typing import Optional, Type

import httpx

from chainpay.core.config import Settings, get_settings
from chainpay.errors import ExplorerAPIError, TransactionNotFoundError
from chainpay.explorer.config import ClientConfig
from chainpay.explorer.models import (
    Balance,
    GasOracle,
    InternalTransaction,
    ProxyTransaction,
    TokenBalance,
    TokenTransfer,
    Transaction,
)
from chainpay.explorer.pipeline import RequestPipeline

LATEST_BLOCK = 99999999


class GasSpeed(str, Enum):
    SAFE = "safe"
    PROPOSE = "propose"
    FAST = "fast"


class ExplorerClient:
    """
    Etherscan-compatible explorer client.

    All calls share one RequestPipeline, so rate limiting, caching and
    key rotation apply across every endpoint.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        pipeline: Optional[RequestPipeline] = None,
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration
            http_client: Optional HTTP client (tests inject a mock transport)
            pipeline: Optional pre-built pipeline to share
        """
        self.config = config
        self.pipeline = pipeline or RequestPipeline(config, http_client=http_client)

    @classmethod
    def from_api_key(cls, api_key: str, network: str = "mainnet") -> "ExplorerClient":
        return cls(ClientConfig.for_network(api_key, network))

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ExplorerClient":
        """Build a client from environment settings (see chainpay.core.config)."""
        return cls(ClientConfig.from_settings(settings or get_settings()))

    # Account

    async def get_balance(self, address: str) -> Balance:
        params = [("address", address), ("tag", "latest")]
        wei = await self.pipeline.fetch("account", "balance", params, str)
        return Balance(wei=wei or "0")

    async def get_transactions(
        self,
        address: str,
        start_block: int = 0,
        end_block: int = LATEST_BLOCK,
        page: int = 1,
        offset: int = 100,
        sort: str = "desc",
    ) -> list[Transaction]:
        params = [
            ("address", address),
            ("startblock", str(start_block)),
            ("endblock", str(end_block)),
            ("page", str(page)),
            ("offset", str(offset)),
            ("sort", sort),
        ]
        result = await self.pipeline.fetch(
            "account", "txlist", params, list[Transaction]
        )
        return result or []

    async def get_internal_transactions(
        self,
        address: str,
        start_block: int = 0,
        end_block: int = LATEST_BLOCK,
        page: int = 1,
        offset: int = 100,
        sort: str = "desc",
    ) -> list[InternalTransaction]:
        params = [
            ("address", address),
            ("startblock", str(start_block)),
            ("endblock", str(end_block)),
            ("page", str(page)),
            ("offset", str(offset)),
            ("sort", sort),
        ]
        result = await self.pipeline.fetch(
            "account", "txlistinternal", params, list[InternalTransaction]
        )
        return result or []

    # Tokens

    async def get_token_transfers(
        self,
        address: str,
        contract_address: Optional[str] = None,
        start_block: int = 0,
        end_block: int = LATEST_BLOCK,
        page: int = 1,
        offset: int = 100,
        sort: str = "desc",
    ) -> list[TokenTransfer]:
        params = [
            ("address", address),
            ("startblock", str(start_block)),
            ("endblock", str(end_block)),
            ("page", str(page)),
            ("offset", str(offset)),
            ("sort", sort),
        ]
        if contract_address:
            params.append(("contractaddress", contract_address))

        result = await self.pipeline.fetch(
            "account", "tokentx", params, list[TokenTransfer]
        )
        return result or []

    async def get_token_balance(
        self, address: str, contract_address: str, decimals: int
    ) -> TokenBalance:
        """Token balance; decimals come from the caller, not the network."""
        params = [
            ("contractaddress", contract_address),
            ("address", address),
            ("tag", "latest"),
        ]
        raw = await self.pipeline.fetch("account", "tokenbalance", params, str)
        return TokenBalance(
            contract_address=contract_address, balance=raw or "0", decimals=decimals
        )

    # Gas

    async def get_gas_oracle(self) -> GasOracle:
        oracle = await self.pipeline.fetch("gastracker", "gasoracle", (), GasOracle)
        if oracle is None:
            raise ExplorerAPIError("Gas oracle returned no data")
        return oracle

    async def estimate_gas_price(self, speed: GasSpeed = GasSpeed.PROPOSE) -> Decimal:
        """Suggested gas price in gwei."""
        oracle = await self.get_gas_oracle()
        match GasSpeed(speed):
            case GasSpeed.SAFE:
                return oracle.safe_gwei
            case GasSpeed.PROPOSE:
                return oracle.propose_gwei
            case GasSpeed.FAST:
                return oracle.fast_gwei

    # Proxy / transactions

    async def get_transaction(self, tx_hash: str) -> ProxyTransaction:
        tx = await self.pipeline.fetch(
            "proxy",
            "eth_getTransactionByHash",
            [("txhash", tx_hash)],
            Optional[ProxyTransaction],
        )
        if tx is None:
            raise TransactionNotFoundError(tx_hash)
        return tx

    async def get_block_number(self) -> int:
        block_hex = await self.pipeline.fetch("proxy", "eth_blockNumber", (), str)
        try:
            return int(block_hex, 16)
        except (TypeError, ValueError) as e:
            raise ExplorerAPIError(f"Invalid block number format: {block_hex!r}") from e

    async def get_confirmations(self, tx_hash: str) -> int:
        """Confirmations for a mined transaction (0 while unmined)."""
        tx = await self.get_transaction(tx_hash)
        tx_block = tx.block
        if tx_block is None:
            return 0

        current_block = await self.get_block_number()
        if current_block < tx_block:
            return 0
        return current_block - tx_block + 1

    # Administration

    def clear_cache(self) -> None:
        self.pipeline.clear_cache()

    def cache_stats(self) -> tuple[int, int]:
        return self.pipeline.cache_stats()

    async def aclose(self) -> None:
        await self.pipeline.aclose()

    async def __aenter__(self) -> "ExplorerClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
