"""
Memory Store Implementation

Thread-safe in-memory key/value store with per-entry expiry.
Used as the name index in front of the emote registry.

Features:
- Thread-safe operations with Lock
- TTL-based expiration, checked on read
- Periodic sweep of expired entries (see cleanup_expired)
- Injectable clock for tests
"""

import time
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar
from dataclasses import dataclass
from threading import Lock
from datetime import datetime

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """
    Cache entry data structure
    """
    key: str                         # Normalized lookup key
    value: V                         # Cached value
    timestamp: float                 # Clock value when stored
    ttl: float                       # Time to live in seconds (<= 0 never expires)

    def is_expired(self, now: float) -> bool:
        """Check if this entry has expired at `now`"""
        if self.ttl <= 0:
            return False
        return now - self.timestamp >= self.ttl

    @property
    def expires_at(self) -> Optional[str]:
        """Get ISO format expiration time (None if the entry never expires)"""
        if self.ttl <= 0:
            return None
        return datetime.fromtimestamp(self.timestamp + self.ttl).isoformat()


class TTLStore(Generic[V]):
    """
    Thread-safe in-memory storage with time-based expiry

    The store is an accelerator, never a source of truth: an expired
    entry is treated exactly like a missing one.
    """

    def __init__(
        self,
        default_ttl: float = 3600.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize memory store

        Args:
            default_ttl: Default time-to-live in seconds (<= 0 disables expiry)
            clock: Time source, defaults to time.time
        """
        self._store: Dict[str, CacheEntry[V]] = {}
        self._lock = Lock()
        self._default_ttl = default_ttl
        self._clock = clock or time.time
        self._hits = 0
        self._misses = 0

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def set(self, key: str, value: V, ttl: Optional[float] = None) -> None:
        """
        Store value under key, replacing any previous entry

        Args:
            key: Lookup key
            value: Value to cache
            ttl: Optional custom TTL
        """
        with self._lock:
            self._store[key] = CacheEntry(
                key=key,
                value=value,
                timestamp=self._clock(),
                ttl=self._default_ttl if ttl is None else ttl,
            )

    def get(self, key: str) -> Optional[V]:
        """
        Get cached value by key

        Returns:
            The value if present and not expired, None otherwise
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(self._clock()):
                del self._store[key]
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def delete(self, key: str) -> bool:
        """
        Delete cache entry

        Returns:
            True if deleted, False if not found
        """
        with self._lock:
            if key in self._store:
                del self._store[key]
                return True
            return False

    def clear(self) -> int:
        """
        Clear all cache entries

        Returns:
            Number of entries deleted
        """
        with self._lock:
            count = len(self._store)
            self._store.clear()
            return count

    def keys(self) -> List[str]:
        """List keys of all live (non-expired) entries"""
        with self._lock:
            now = self._clock()
            return [k for k, v in self._store.items() if not v.is_expired(now)]

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    def cleanup_expired(self) -> int:
        """
        Remove expired entries

        Returns:
            Number of entries removed
        """
        with self._lock:
            return self._cleanup_expired()

    def stats(self) -> Dict[str, Any]:
        """
        Get cache statistics
        """
        with self._lock:
            now = self._clock()
            live = sum(1 for e in self._store.values() if not e.is_expired(now))
            return {
                "total_entries": len(self._store),
                "live_entries": live,
                "hits": self._hits,
                "misses": self._misses,
                "default_ttl_seconds": self._default_ttl,
            }

    def _cleanup_expired(self) -> int:
        """
        Remove expired entries (internal, assumes lock held)
        """
        now = self._clock()
        expired = [
            k for k, v in self._store.items()
            if v.is_expired(now)
        ]
        for k in expired:
            del self._store[k]
        return len(expired)
