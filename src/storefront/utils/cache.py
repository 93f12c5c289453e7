"""In-process query cache with explicit TTLs and explicit invalidation.

Entries are keyed by the *shape* of the query (a tuple such as
``("catalogue", "categories")``). Writers call ``invalidate`` at the points
where the cached answer can change; nothing is invalidated implicitly.
"""

import threading
import time
from collections.abc import Callable, Hashable
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


class QueryCache:
    def __init__(self, default_ttl: float = 300, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default=None):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default

            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return default

            return value

    def set(self, key: Hashable, value, ttl: float | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = (self._clock() + ttl, value)

    def get_or_load(self, key: Hashable, loader: Callable[[], Any], ttl: float | None = None):
        """Return the cached value for ``key``, calling ``loader`` on a miss."""
        missing = object()
        value = self.get(key, missing)
        if value is not missing:
            return value

        value = loader()
        self.set(key, value, ttl)
        logger.debug("cache_filled", key=key)
        return value

    def invalidate(self, *keys: Hashable) -> None:
        with self._lock:
            for key in keys:
                self._entries.pop(key, None)
        logger.debug("cache_invalidated", keys=keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        missing = object()
        return self.get(key, missing) is not missing

    def __len__(self) -> int:
        return len(self._entries)
