"""
In-memory TTL cache for external lookup results.

Provides a time-aware key/value store used by the image search client:
- Explicit per-entry expiry (key -> value, expires_at)
- Targeted invalidation before forced refreshes
- Thread-safe operations for concurrent access

The cache is injected into its consumers rather than living as a module
singleton, so a distributed backend exposing the same methods (get, set,
invalidate, clear, stats) can replace it without touching resolver logic.

Memory budget: ~500 entries x ~5 photo dicts per entry
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from hangar.config import config

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class CacheEntry:
    """Cached value with its absolute expiry time."""
    value: Any
    expires_at: float
    cached_at: float = field(default_factory=time.time)

    def is_expired(self, now: Optional[float] = None) -> bool:
        return (now if now is not None else time.time()) >= self.expires_at


class TTLCache:
    """
    Thread-safe in-memory cache with per-entry expiry.

    Values may legitimately be empty (an empty photo list is a valid cached
    "nothing found" answer), so misses are reported with the default argument
    of get() rather than with a falsy value.
    """

    def __init__(
        self,
        ttl_seconds: int = None,
        max_entries: int = None,
        clock=time.time,
    ):
        self.ttl_seconds = config.cache.image_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.max_entries = config.cache.max_entries if max_entries is None else max_entries
        self._clock = clock

        self._cache: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

        # Statistics
        self._hits = 0
        self._misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get cached value by key.

        Returns default if not cached or expired.
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                if not entry.is_expired(self._clock()):
                    self._hits += 1
                    logger.debug(f'Cache hit for key: {key}')
                    return entry.value
                # Expired
                del self._cache[key]
            self._misses += 1
        return default

    def contains(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        """Store value under key for ttl_seconds (defaults to the cache TTL)."""
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        now = self._clock()
        with self._lock:
            self._cache[key] = CacheEntry(value=value, expires_at=now + ttl, cached_at=now)

            # Evict if over capacity
            if len(self._cache) > self.max_entries:
                self._evict_oldest()

        logger.debug(f'Cached result for key: {key}')

    def _evict_oldest(self) -> None:
        """Remove oldest entries when over capacity."""
        entries = sorted(
            self._cache.items(),
            key=lambda x: x[1].cached_at
        )
        # Remove oldest 10%
        to_remove = max(1, len(entries) // 10)
        for key, _ in entries[:to_remove]:
            del self._cache[key]

    def invalidate(self, key: str) -> bool:
        """Remove specific entry from cache. Returns True if it existed."""
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        """Clear entire cache."""
        with self._lock:
            self._cache.clear()

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        now = self._clock()
        with self._lock:
            expired = sum(1 for entry in self._cache.values() if entry.is_expired(now))
            return {
                'entries': len(self._cache),
                'expired_entries': expired,
                'valid_entries': len(self._cache) - expired,
                'ttl_seconds': self.ttl_seconds,
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': self._hits / (self._hits + self._misses) if (self._hits + self._misses) > 0 else 0,
            }
