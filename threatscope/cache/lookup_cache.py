"""
Lookup Cache — bounded in-memory cache for expensive cross-source lookups.

Used for repeated identity checks within a short window. Capacity and TTL
are constructor parameters; when full, the oldest entry is evicted.
"""

from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable

_MISSING = object()


@dataclass
class CacheEntry:
    """A cached lookup result."""

    value: Any
    timestamp: float = field(default_factory=time.monotonic)


class LookupCache:
    """
    Fixed-capacity, insertion-ordered cache with per-entry expiry.

    Instances are passed by reference into the detectors that need them;
    there is no module-level cache state.
    """

    def __init__(
        self,
        capacity: int = 1024,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"Cache capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def _is_expired(self, entry: CacheEntry) -> bool:
        return (self._clock() - entry.timestamp) > self.ttl_seconds

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a cached value.

        Returns ``default`` if not cached or expired. ``None`` is a valid
        cached value (e.g. "no identity found").
        """
        entry = self._store.get(key)
        if entry is None:
            self.misses += 1
            return default

        if self._is_expired(entry):
            del self._store[key]
            self.misses += 1
            return default

        self.hits += 1
        return entry.value

    def contains(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def put(self, key: str, value: Any) -> None:
        """Cache a value, evicting the oldest entries beyond capacity."""
        if key in self._store:
            del self._store[key]
        self._store[key] = CacheEntry(value=value, timestamp=self._clock())
        while len(self._store) > self.capacity:
            self._store.popitem(last=False)

    def invalidate(self, key: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cached entries."""
        self._store.clear()

    @property
    def size(self) -> int:
        """Number of cached entries."""
        return len(self._store)

    def stats(self) -> dict[str, Any]:
        """Cache statistics."""
        expired = sum(1 for e in self._store.values() if self._is_expired(e))
        return {
            "total_entries": len(self._store),
            "expired_entries": expired,
            "active_entries": len(self._store) - expired,
            "capacity": self.capacity,
            "hits": self.hits,
            "misses": self.misses,
        }
