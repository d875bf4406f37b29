"""
Request pipeline shared by every explorer call.

Every request goes through the same steps: cache lookup, rate limiting,
API key rotation, HTTP GET, envelope parsing and caching of the result.
"""

from __future__ import annotations

from functools import lru_cache
from types import TracebackType
from typing import Any, Mapping, Optional, Sequence, Type, Union

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from chainpay.errors import ExplorerAPIError, SerializationError, TransportError
from chainpay.explorer.cache import ResponseCache, make_cache_key
from chainpay.explorer.config import ClientConfig
from chainpay.explorer.keys import KeyRotator
from chainpay.explorer.rate_limit import RateLimiter

logger = structlog.get_logger()

ParamsInput = Union[Sequence[tuple[str, str]], Mapping[str, str]]

# status "0" with these messages means "empty result", not failure
BENIGN_MESSAGES = frozenset({"No transactions found", "NOTOK"})


@lru_cache(maxsize=None)
def type_adapter(response_type: Any) -> TypeAdapter:
    """Return the cached validator for a response type."""
    return TypeAdapter(response_type)


class RequestPipeline:
    """
    Rate-limited, cached, key-rotating access to an explorer API.

    One instance is meant to be shared by all concurrent verifications.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        rate_limiter: Optional[RateLimiter] = None,
        cache: Optional[ResponseCache] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            config: Client configuration (validated here)
            http_client: HTTP client to use; one is created if omitted
            rate_limiter: Custom rate limiter (defaults to config rate)
            cache: Custom response cache (defaults to config TTL/size)

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        config.validate_config()
        self.config = config
        self.keys = KeyRotator(config.api_keys)
        self.rate_limiter = rate_limiter or RateLimiter(config.rate_limit_per_second)
        self.cache = cache or ResponseCache(
            ttl_seconds=config.cache_ttl_seconds,
            max_entries=config.cache_max_size,
        )
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=config.timeout_seconds)

        logger.info(
            "pipeline.initialized",
            base_url=config.base_url,
            api_keys=len(self.keys),
            rate_limit_per_second=config.rate_limit_per_second,
            cache_ttl_seconds=config.cache_ttl_seconds,
        )

    async def fetch(
        self,
        module: str,
        action: str,
        params: ParamsInput = (),
        response_type: Any = Any,
    ) -> Any:
        """
        Fetch ``result`` for (module, action, params).

        Args:
            module: Explorer module (account, proxy, gastracker, ...)
            action: Explorer action within the module
            params: Query parameters, in a deterministic order
            response_type: Type the result is validated into

        Returns:
            The validated result, or None for an empty-result response

        Raises:
            TransportError: If the HTTP request fails
            ExplorerAPIError: If the API reports an error
            SerializationError: If the response has an unexpected shape
        """
        pairs = list(params.items()) if isinstance(params, Mapping) else list(params)
        cache_key = make_cache_key(module, action, pairs)

        if self.cache.enabled:
            entry = self.cache.get(cache_key)
            if entry is not None:
                logger.debug("pipeline.cache_hit", key=cache_key)
                return self._deserialize(entry.value, response_type)

        await self.rate_limiter.acquire()

        api_key = self.keys.next_key()
        query = [("module", module), ("action", action), ("apikey", api_key), *pairs]

        logger.debug("pipeline.request", module=module, action=action)
        try:
            response = await self._http.get(self.config.base_url, params=query)
        except httpx.HTTPError as e:
            logger.warning(
                "pipeline.transport_error",
                module=module,
                action=action,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TransportError(f"HTTP request failed: {e}") from e

        result = self._unwrap(response)

        if result is not None and self.cache.enabled:
            self.cache.set(cache_key, result)

        if result is None:
            return None
        return self._deserialize(result, response_type)

    def _unwrap(self, response: httpx.Response) -> Any:
        """Check the HTTP status and the {status, message, result} envelope."""
        try:
            body = response.json()
        except ValueError as e:
            if not response.is_success:
                raise ExplorerAPIError(
                    f"HTTP {response.status_code}: {response.reason_phrase}"
                ) from e
            raise SerializationError(f"Response is not valid JSON: {e}") from e

        if not isinstance(body, dict):
            raise SerializationError(
                f"Expected a JSON object, got {type(body).__name__}"
            )

        message = body.get("message")
        if not isinstance(message, str):
            message = "Unknown"

        if not response.is_success:
            raise ExplorerAPIError(f"HTTP {response.status_code}: {message}")

        # proxy (JSON-RPC) responses carry no status field
        status = str(body.get("status", "1"))
        if status == "0" and message in BENIGN_MESSAGES:
            result = body.get("result")
            # NOTOK also carries real failures, e.g. "Invalid API Key"
            if isinstance(result, str) and result:
                logger.warning("pipeline.api_error", message=message, result=result)
                raise ExplorerAPIError(result)
            logger.debug("pipeline.empty_result", message=message)
            return result if isinstance(result, (list, dict)) else None

        if status == "0":
            logger.warning("pipeline.api_error", message=message)
            raise ExplorerAPIError(message)

        if "error" in body:
            error = body["error"]
            detail = error.get("message") if isinstance(error, dict) else error
            raise ExplorerAPIError(str(detail))

        if "result" not in body:
            raise ExplorerAPIError("Missing 'result' field in response")
        return body["result"]

    @staticmethod
    def _deserialize(value: Any, response_type: Any) -> Any:
        if response_type is Any:
            return value
        try:
            return type_adapter(response_type).validate_python(value)
        except ValidationError as e:
            raise SerializationError(str(e)) from e

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("pipeline.cache_cleared")

    def cache_stats(self) -> tuple[int, int]:
        return self.cache.stats()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "RequestPipeline":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
