"""
Process-wide key/value cache with per-entry TTL.

Shared by every source client. Entries are expired lazily on access; a
cached ``None`` is a real hit (negative caching), so ``get`` returns the
entry wrapper rather than the bare value.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Cached value with the time it was stored and its TTL in seconds."""

    data: Any
    timestamp: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        """Check expiry against the given clock reading."""
        return now - self.timestamp >= self.ttl


class TTLCache:
    """In-memory TTL cache with an injectable clock."""

    def __init__(
        self,
        default_ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize cache.

        Args:
            default_ttl_seconds: TTL used when ``set`` is given none
            clock: Returns current time in seconds (tests pass a fake)
        """
        self.default_ttl = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        """Get a live entry.

        Args:
            key: Cache key

        Returns:
            The entry, or None on miss or expiry

        Example:
            >>> cache = TTLCache()
            >>> cache.set("usda:food:1", None)
            >>> entry = cache.get("usda:food:1")
            >>> assert entry is not None and entry.data is None
        """
        entry = self._entries.get(key)

        if entry is None:
            logger.debug("Cache miss", key=key)
            return None

        if entry.is_expired(self._clock()):
            logger.debug("Cache expired", key=key)
            del self._entries[key]
            return None

        logger.debug("Cache hit", key=key)
        return entry

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        """Store or overwrite an entry.

        Args:
            key: Cache key
            data: Value to cache (``None`` allowed)
            ttl: TTL in seconds (default: ``default_ttl``)
        """
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(data=data, timestamp=self._clock(), ttl=ttl)
        logger.debug("Cached item", key=key, ttl=ttl)

    def invalidate(self, key: str) -> bool:
        """Drop one entry. Returns True if it existed."""
        return self._entries.pop(key, None) is not None

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with ``prefix``.

        Returns:
            Number of entries removed
        """
        keys = [key for key in self._entries if key.startswith(prefix)]
        for key in keys:
            del self._entries[key]

        if keys:
            logger.info("Cache entries invalidated", prefix=prefix, count=len(keys))

        return len(keys)

    def clear(self) -> None:
        """Clear all cache entries."""
        self._entries.clear()
        logger.info("Cache cleared")

    def size(self) -> int:
        """Number of stored entries (expired ones included until touched)."""
        return len(self._entries)
