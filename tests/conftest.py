import sys
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

# Project root on sys.path so `import chainpay` works when running pytest from root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from chainpay.explorer.client import ExplorerClient  # noqa: E402
from chainpay.explorer.config import ClientConfig  # noqa: E402

RECIPIENT = "0x" + "a" * 40
OTHER_ADDRESS = "0x" + "b" * 40
USDT_CONTRACT = "0xdAC17F958D2ee523a2206206994597C13D831ec7"
ONE_ETHER_WEI = 10**18


def tx_hash(n: int) -> str:
    """Deterministic 0x-prefixed 64 hex digit hash."""
    return "0x" + f"{n:064x}"


def envelope(result: Any, status: str = "1", message: str = "OK") -> dict:
    return {"status": status, "message": message, "result": result}


def native_tx(
    n: int,
    value_wei: int,
    confirmations: int,
    to: str = RECIPIENT,
    is_error: str = "0",
    receipt_status: str = "1",
) -> dict:
    """A txlist record as the explorer returns it."""
    return {
        "blockNumber": str(18_000_000 + n),
        "timeStamp": "1700000000",
        "hash": tx_hash(n),
        "from": OTHER_ADDRESS,
        "to": to,
        "value": str(value_wei),
        "isError": is_error,
        "txreceipt_status": receipt_status,
        "confirmations": str(confirmations),
    }


def token_transfer(
    n: int,
    raw_value: int,
    confirmations: int,
    to: str = RECIPIENT,
    contract: str = USDT_CONTRACT,
    token_decimal: str = "6",
) -> dict:
    """A tokentx record as the explorer returns it."""
    return {
        "blockNumber": str(18_000_000 + n),
        "timeStamp": "1700000000",
        "hash": tx_hash(n),
        "from": OTHER_ADDRESS,
        "contractAddress": contract,
        "to": to,
        "value": str(raw_value),
        "tokenName": "Tether USD",
        "tokenSymbol": "USDT",
        "tokenDecimal": token_decimal,
        "confirmations": str(confirmations),
    }


class ExplorerStub:
    """
    In-memory explorer API served through httpx.MockTransport.

    Responses are looked up by ``action``; every request is recorded.
    """

    def __init__(self):
        self.responses: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []
        self.error: Optional[Exception] = None

    def respond(self, action: str, body: Any, status_code: int = 200) -> None:
        self.responses[action] = (status_code, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error

        action = request.url.params.get("action")
        status_code, body = self.responses.get(
            action, (200, envelope([], status="0", message="No transactions found"))
        )
        if isinstance(body, (str, bytes)):
            return httpx.Response(status_code, content=body)
        return httpx.Response(status_code, json=body)

    def actions(self) -> list[str]:
        return [r.url.params.get("action") for r in self.requests]


@pytest.fixture
def stub() -> ExplorerStub:
    return ExplorerStub()


@pytest.fixture
def make_client(stub: ExplorerStub) -> Callable[..., ExplorerClient]:
    """Factory for an ExplorerClient wired to the stub transport."""

    def factory(**overrides: Any) -> ExplorerClient:
        values: dict[str, Any] = {
            "api_keys": ["test-key"],
            "base_url": "https://api.example.test/api",
            "rate_limit_per_second": 1000,
        }
        values.update(overrides)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(stub.handler))
        return ExplorerClient(ClientConfig(**values), http_client=http_client)

    return factory


@pytest.fixture
def client(make_client: Callable[..., ExplorerClient]) -> ExplorerClient:
    return make_client()
