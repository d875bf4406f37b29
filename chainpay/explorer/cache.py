"""
Time-to-live response cache.

Entries expire ``ttl_seconds`` after insertion; when full, the least
recently used entry is evicted first.
"""

from __future__ import annotations

import json
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

Params = Sequence[tuple[str, str]]


def make_cache_key(module: str, action: str, params: Params) -> str:
    """Build ``module:action:k1=v1&k2=v2``; params keep their given order."""
    query = "&".join(f"{key}={value}" for key, value in params)
    return f"{module}:{action}:{query}"


@dataclass
class CacheEntry:
    key: str
    value: Any
    inserted_at: float
    weight: int


class ResponseCache:
    """Thread-safe TTL + capacity bounded cache of explorer results."""

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def _is_live(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.inserted_at < self.ttl_seconds

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for key, or None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._is_live(entry):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return entry

    def set(self, key: str, value: Any) -> None:
        weight = len(json.dumps(value, default=str))
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key, value=value, inserted_at=self._clock(), weight=weight
            )
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> tuple[int, int]:
        """Return (entry_count, approximate weighted size in bytes)."""
        with self._lock:
            expired = [k for k, e in self._entries.items() if not self._is_live(e)]
            for key in expired:
                del self._entries[key]
            return len(self._entries), sum(e.weight for e in self._entries.values())
