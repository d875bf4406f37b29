"""Wire-format records returned by the explorer API.

Numeric fields arrive as decimal strings; helpers convert them. Unknown
fields are ignored so provider additions do not break parsing.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from chainpay.amounts import NATIVE_DECIMALS, to_major


def _to_int(value: str, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class _ExplorerRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Transaction(_ExplorerRecord):
    """Normal (native asset) transaction from ``account/txlist``."""

    block_number: str = Field(default="", alias="blockNumber")
    time_stamp: str = Field(default="", alias="timeStamp")
    hash: str
    nonce: str = ""
    block_hash: str = Field(default="", alias="blockHash")
    transaction_index: str = Field(default="", alias="transactionIndex")
    from_address: str = Field(default="", alias="from")
    to: str = ""
    value: str = "0"
    gas: str = ""
    gas_price: str = Field(default="", alias="gasPrice")
    is_error: str = Field(default="0", alias="isError")
    txreceipt_status: str = "1"
    input: str = ""
    contract_address: str = Field(default="", alias="contractAddress")
    cumulative_gas_used: str = Field(default="", alias="cumulativeGasUsed")
    gas_used: str = Field(default="", alias="gasUsed")
    confirmations: str = "0"
    method_id: str = Field(default="", alias="methodId")
    function_name: str = Field(default="", alias="functionName")

    @property
    def confirmation_count(self) -> int:
        return _to_int(self.confirmations)

    @property
    def value_wei(self) -> int:
        return _to_int(self.value)

    @property
    def value_native(self) -> Decimal:
        return to_major(self.value_wei, NATIVE_DECIMALS)

    def is_successful(self) -> bool:
        return self.is_error == "0" and self.txreceipt_status == "1"


class InternalTransaction(_ExplorerRecord):
    """Contract-internal transfer from ``account/txlistinternal``."""

    block_number: str = Field(default="", alias="blockNumber")
    time_stamp: str = Field(default="", alias="timeStamp")
    hash: str
    from_address: str = Field(default="", alias="from")
    to: str = ""
    value: str = "0"
    contract_address: str = Field(default="", alias="contractAddress")
    input: str = ""
    tx_type: str = Field(default="", alias="type")
    gas: str = ""
    gas_used: str = Field(default="", alias="gasUsed")
    trace_id: str = Field(default="", alias="traceId")
    is_error: str = Field(default="0", alias="isError")
    err_code: str = Field(default="", alias="errCode")


class TokenTransfer(_ExplorerRecord):
    """Token transfer event from ``account/tokentx``."""

    block_number: str = Field(default="", alias="blockNumber")
    time_stamp: str = Field(default="", alias="timeStamp")
    hash: str
    nonce: str = ""
    block_hash: str = Field(default="", alias="blockHash")
    from_address: str = Field(default="", alias="from")
    contract_address: str = Field(default="", alias="contractAddress")
    to: str = ""
    value: str = "0"
    token_name: str = Field(default="", alias="tokenName")
    token_symbol: str = Field(default="", alias="tokenSymbol")
    token_decimal: str = Field(default="18", alias="tokenDecimal")
    transaction_index: str = Field(default="", alias="transactionIndex")
    gas: str = ""
    gas_price: str = Field(default="", alias="gasPrice")
    gas_used: str = Field(default="", alias="gasUsed")
    cumulative_gas_used: str = Field(default="", alias="cumulativeGasUsed")
    input: str = ""
    confirmations: str = "0"

    @property
    def confirmation_count(self) -> int:
        return _to_int(self.confirmations)

    @property
    def raw_value(self) -> int:
        return _to_int(self.value)

    @property
    def decimals(self) -> int:
        """Decimals as reported by the explorer (informational only)."""
        return _to_int(self.token_decimal, default=18)

    def value_in(self, decimals: int) -> Decimal:
        """Value in major units for the given decimal count."""
        return to_major(self.raw_value, decimals)


class Balance(BaseModel):
    wei: str

    @property
    def native(self) -> Decimal:
        return to_major(_to_int(self.wei), NATIVE_DECIMALS)


class TokenBalance(BaseModel):
    contract_address: str
    balance: str
    decimals: int

    @property
    def value(self) -> Decimal:
        return to_major(_to_int(self.balance), self.decimals)


def _gwei(value: str) -> Decimal:
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError):
        return Decimal(0)


class GasOracle(_ExplorerRecord):
    """Gas price suggestions in gwei from ``gastracker/gasoracle``."""

    last_block: Optional[str] = Field(default=None, alias="LastBlock")
    safe_gas_price: str = Field(default="0", alias="SafeGasPrice")
    propose_gas_price: str = Field(default="0", alias="ProposeGasPrice")
    fast_gas_price: str = Field(default="0", alias="FastGasPrice")
    suggest_base_fee: str = Field(default="0", alias="suggestBaseFee")
    gas_used_ratio: str = Field(default="", alias="gasUsedRatio")

    @property
    def safe_gwei(self) -> Decimal:
        return _gwei(self.safe_gas_price)

    @property
    def propose_gwei(self) -> Decimal:
        return _gwei(self.propose_gas_price)

    @property
    def fast_gwei(self) -> Decimal:
        return _gwei(self.fast_gas_price)


class ProxyTransaction(_ExplorerRecord):
    """Transaction object from ``proxy/eth_getTransactionByHash`` (hex fields)."""

    hash: str
    block_number: Optional[str] = Field(default=None, alias="blockNumber")
    from_address: str = Field(default="", alias="from")
    to: Optional[str] = None
    value: str = "0x0"

    @property
    def block(self) -> Optional[int]:
        """Block number, or None while the transaction is unmined."""
        if not self.block_number:
            return None
        return int(self.block_number, 16)
