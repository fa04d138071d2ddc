"""TTL cache keyed by arbitrary hashable keys."""

import time
from typing import Generic, Hashable, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """Small in-memory cache with per-entry expiry."""

    def __init__(self, ttl_seconds: float = 300):
        self._entries: dict[K, tuple[V, float]] = {}
        self._ttl = ttl_seconds

    def get(self, key: K) -> V | None:
        """Get cached value if not expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, cached_at = entry
        if time.time() - cached_at >= self._ttl:
            del self._entries[key]
            return None
        return value

    def set(self, key: K, value: V) -> None:
        """Store value in cache."""
        self._entries[key] = (value, time.time())

    def invalidate(self, key: K | None = None) -> None:
        """Drop one entry, or everything when no key is given."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]

    def __len__(self) -> int:
        return len(self._entries)
