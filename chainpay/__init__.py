"""
chainpay: verify and monitor incoming crypto payments through an
Etherscan-compatible block explorer API.
"""

from chainpay.errors import ChainPayError
from chainpay.explorer import ClientConfig, ExplorerClient
from chainpay.payments import (
    NATIVE,
    Payment,
    PaymentMonitor,
    PaymentRequest,
    PaymentVerifier,
    TokenCurrency,
)

__all__ = [
    "ChainPayError",
    "ClientConfig",
    "ExplorerClient",
    "NATIVE",
    "Payment",
    "PaymentMonitor",
    "PaymentRequest",
    "PaymentVerifier",
    "TokenCurrency",
]
