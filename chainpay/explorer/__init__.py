"""
Explorer API access.

Everything that talks to the block explorer goes through one
RequestPipeline: cached, rate limited, rotating across API keys.
"""

from chainpay.explorer.cache import ResponseCache
from chainpay.explorer.client import ExplorerClient, GasSpeed
from chainpay.explorer.config import NETWORKS, ClientConfig
from chainpay.explorer.keys import KeyRotator
from chainpay.explorer.pipeline import RequestPipeline
from chainpay.explorer.rate_limit import RateLimiter

__all__ = [
    "ClientConfig",
    "NETWORKS",
    "ExplorerClient",
    "GasSpeed",
    "KeyRotator",
    "RateLimiter",
    "RequestPipeline",
    "ResponseCache",
]
