"""In-memory memoization table for template resolution."""

import threading
from collections.abc import Hashable
from typing import Any

from render_kit.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

_MISSING = object()


class TemplateCache:
    """Process-wide cache of resolved templates.

    Thread-safe for sync endpoints running in a thread pool. Entries never
    expire: a key always maps to the same resolution, so concurrent writers
    only ever race to store equal values.
    """

    def __init__(self, owner: str = ""):
        self.owner = owner
        self._cache: dict[Hashable, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any | None:
        """Get cached value.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found
        """
        with self._lock:
            value = self._cache.get(key, _MISSING)

        if value is _MISSING:
            return None

        log_with_context(
            logger,
            "debug",
            "Template cache hit",
            cache_owner=self.owner,
            cache_key=repr(key),
            event_type="template_cache_hit",
        )
        return value

    def set(self, key: Hashable, value: Any) -> None:
        """Set cached value (last write wins).

        Args:
            key: Cache key
            value: Value to cache
        """
        with self._lock:
            self._cache[key] = value
        log_with_context(
            logger,
            "debug",
            "Template cache set",
            cache_owner=self.owner,
            cache_key=repr(key),
            event_type="template_cache_set",
        )

    def clear(self, key: Hashable | None = None) -> None:
        """Clear cache entry or entire cache.

        Args:
            key: Specific key to clear, or None to clear all
        """
        with self._lock:
            if key is not None:
                self._cache.pop(key, None)
            else:
                self._cache.clear()
        log_with_context(
            logger,
            "debug",
            "Template cache cleared",
            cache_owner=self.owner,
            event_type="template_cache_clear",
        )

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
