"""In-memory LRU store for resized image bytes."""

import threading
from typing import Protocol, runtime_checkable

from cachetools import LRUCache
from loguru import logger


@runtime_checkable
class ImageCache(Protocol):
    """Contract the pipeline relies on.

    - a key passed to ``add`` is reported by ``contains`` until evicted
    - ``add`` never fails observably
    - both methods are safe to call from concurrent requests
    """

    def contains(self, key: str) -> bool: ...

    def add(self, key: str, data: bytes) -> None: ...


class _EvictionCountingLRU(LRUCache):
    """``cachetools.LRUCache`` that counts evictions and tracks byte sizes.

    Sizes are kept on the side because reading values back through the cache
    would refresh their recency.
    """

    def __init__(self, maxsize: int):
        super().__init__(maxsize=maxsize)
        self.evictions: int = 0
        self.sizes: dict[str, int] = {}

    def __setitem__(self, key: str, value: bytes) -> None:
        super().__setitem__(key, value)
        self.sizes[key] = len(value)

    def __delitem__(self, key: str) -> None:
        super().__delitem__(key)
        del self.sizes[key]

    def popitem(self) -> tuple[str, bytes]:
        key, value = super().popitem()
        self.evictions += 1
        logger.debug(f"LRU evicted: {key}")
        return key, value


class LRUImageCache(ImageCache):
    """Capacity-bounded LRU cache of encoded images.

    Entries are counted, not weighed; once ``capacity`` is reached the least
    recently used entry is evicted by the underlying ``cachetools.LRUCache``.
    ``contains`` and ``get`` both refresh an entry. ``LRUCache`` is not
    thread-safe, so every method takes the internal lock.
    """

    def __init__(self, capacity: int = 1024):
        if capacity < 1:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self.capacity: int = capacity
        self._entries: _EvictionCountingLRU = _EvictionCountingLRU(maxsize=capacity)
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def contains(self, key: str) -> bool:
        with self._lock:
            if key in self._entries:
                # Item access is what marks an entry as recently used
                _ = self._entries[key]
                self._hits += 1
                return True
            self._misses += 1
            return False

    def add(self, key: str, data: bytes) -> None:
        with self._lock:
            self._entries[key] = data

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._entries.get(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "capacity": self.capacity,
                "size_bytes": sum(self._entries.sizes.values()),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._entries.evictions,
            }
