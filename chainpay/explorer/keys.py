"""Round-robin API key rotation."""

from __future__ import annotations

import threading
from typing import Sequence

from chainpay.errors import ConfigurationError


class KeyRotator:
    """
    Hands out API keys in round-robin order.

    The cursor only ever increases; the key is ``cursor % len(keys)``.
    Safe to share between tasks and threads.
    """

    def __init__(self, keys: Sequence[str]):
        if not keys:
            raise ConfigurationError("At least one API key required")
        self._keys = tuple(keys)
        self._cursor = 0
        self._lock = threading.Lock()

    def next_key(self) -> str:
        with self._lock:
            index = self._cursor
            self._cursor += 1
        return self._keys[index % len(self._keys)]

    def __len__(self) -> int:
        return len(self._keys)
