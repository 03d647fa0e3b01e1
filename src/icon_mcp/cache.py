"""Bounded in-memory cache for aggregated icon results.

Entries live for the lifetime of the process. When the cache is full, the
oldest-inserted batch of entries is dropped before a new key is stored, so
eviction cost is amortized over ``evict_batch`` inserts. Insertion order is
the only signal tracked; reads do not refresh an entry.

Entries are pure functions of their key, so concurrent writers racing on the
same key are harmless: the last writer wins.
"""

import hashlib
import json
from typing import Any

from loguru import logger

_DEFAULT_MAX_ENTRIES = 200
_DEFAULT_EVICT_BATCH = 50


def cache_key(action: str, params: dict) -> str:
    """Generate a deterministic cache key from action + params."""
    # Sort keys for deterministic hashing
    raw = json.dumps({"action": action, **params}, sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(raw.encode()).hexdigest()


class ResultCache:
    """Insertion-ordered cache with batch eviction."""

    def __init__(
        self,
        max_entries: int = _DEFAULT_MAX_ENTRIES,
        evict_batch: int = _DEFAULT_EVICT_BATCH,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._evict_batch = max(1, evict_batch)
        self._entries: dict[str, Any] = {}
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Any | None:
        """Return the cached value or None on a miss."""
        value = self._entries.get(key)
        if value is None:
            self._misses += 1
            logger.debug(f"Cache MISS: {key[:12]}...")
            return None
        self._hits += 1
        logger.debug(f"Cache HIT: {key[:12]}...")
        return value

    def set(self, key: str, value: Any) -> None:
        """Store a value, evicting the oldest batch first if the cache is full."""
        if key not in self._entries and len(self._entries) >= self._max_entries:
            self._evict_oldest()
        self._entries[key] = value
        logger.debug(f"Cache SET: {key[:12]}... ({len(self._entries)} entries)")

    def _evict_oldest(self) -> None:
        oldest = list(self._entries)[: self._evict_batch]
        for key in oldest:
            del self._entries[key]
        self._evictions += len(oldest)
        logger.debug(f"Evicted {len(oldest)} oldest cache entries")

    def clear(self) -> int:
        """Remove all entries. Returns the number removed."""
        removed = len(self._entries)
        self._entries.clear()
        return removed

    def stats(self) -> dict:
        return {
            "entries": len(self._entries),
            "max_entries": self._max_entries,
            "hits": self._hits,
            "misses": self._misses,
            "evictions": self._evictions,
        }
