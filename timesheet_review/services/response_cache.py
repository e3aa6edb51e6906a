"""
In-memory response cache with TTL expiry and LRU eviction.

The cache is an explicit object handed to the API client that uses it;
there is no module-level cache. The approval workflow never reads from it,
so review decisions are always taken on freshly passed-in state.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)

_MISSING = object()


class ResponseCache:
    """
    Thread-safe key/value cache for read responses.

    Features:
    - Per-entry time-to-live
    - LRU eviction once ``max_size`` entries are held
    - Prefix invalidation, so a write can drop every cached read it affects
    - Hit/miss statistics

    Example:
        >>> cache = ResponseCache(ttl_seconds=60, max_size=100)
        >>> cache.set(("team-scope", "u1"), {"u2": ["p1"]})
        >>> cache.get(("team-scope", "u1"))
        {'u2': ['p1']}
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_size: int = 256,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Lifetime of an entry in seconds (0 disables caching)
            max_size: Maximum number of entries before LRU eviction
            clock: Monotonic time source, injectable for tests
        """
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock

        # key -> (expires_at, value), most recently used last
        self._entries: "OrderedDict[Hashable, Tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()
        self._stats: Dict[str, int] = {
            "hits": 0,
            "misses": 0,
            "expired": 0,
            "evictions": 0,
        }

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0 and self.max_size > 0

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the cached value for ``key`` or ``default``."""
        with self._lock:
            item = self._entries.get(key, _MISSING)
            if item is _MISSING:
                self._stats["misses"] += 1
                return default

            expires_at, value = item
            if self._clock() >= expires_at:
                del self._entries[key]
                self._stats["expired"] += 1
                self._stats["misses"] += 1
                return default

            self._entries.move_to_end(key)
            self._stats["hits"] += 1
            return value

    def set(self, key: Hashable, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """Store ``value`` under ``key``, evicting the LRU entry if full."""
        if not self.enabled:
            return
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                self._stats["evictions"] += 1
                logger.debug(f"Evicted cache entry {evicted!r}")

    def get_or_load(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        """Return the cached value, calling ``loader`` on a miss.

        The loader runs outside the lock; concurrent misses for the same
        key may both load, and the last one wins.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        value = loader()
        self.set(key, value)
        return value

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every tuple key whose first element equals ``prefix``.

        Returns:
            Number of entries removed
        """
        with self._lock:
            doomed = [
                k for k in self._entries if isinstance(k, tuple) and k and k[0] == prefix
            ]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} cached '{prefix}' response(s)")
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_statistics(self) -> Dict[str, int]:
        with self._lock:
            stats = dict(self._stats)
            stats["size"] = len(self._entries)
            return stats
