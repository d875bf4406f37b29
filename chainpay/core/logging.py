from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Dict, Iterator

import structlog


def _add_log_level(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    event_dict["level"] = method_name
    return event_dict


def configure_logging(env: str = "development", level: str = "INFO") -> None:
    """Configure structlog for readable console logs (JSON in production)."""
    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_log_level,
        timestamper,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(log_level)

    renderer: Any
    if env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


@contextmanager
def payment_context(**values: Any) -> Iterator[None]:
    """Bind payment identifiers to every log line emitted inside the block."""
    structlog.contextvars.bind_contextvars(**values)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*values)
