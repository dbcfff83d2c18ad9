"""In-memory response cache with per-entry TTL."""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from cachetools import TLRUCache

from npmplus.logger import session_logger as logger

_KEY_UNSAFE = re.compile(r"[^a-zA-Z0-9._-]")


@dataclass(frozen=True)
class _Entry:
    value: Any
    ttl: float


class CacheService:
    """TTL cache used to avoid hammering the npm registry and friends.

    Each entry carries its own TTL; ``set`` without a TTL uses the default.
    Capacity is bounded, least recently used entries are dropped first.
    """

    def __init__(
        self,
        default_ttl: float = 600,
        max_keys: int = 1000,
        timer: Callable[[], float] = time.monotonic,
    ):
        self._default_ttl = default_ttl
        self._cache: TLRUCache = TLRUCache(
            maxsize=max_keys,
            ttu=lambda _key, entry, now: now + entry.ttl,
            timer=timer,
        )
        self._hits = 0
        self._misses = 0
        self._sets = 0
        self._deletes = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if absent or expired."""
        entry = self._cache.get(key)
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value``; a ttl of zero or less expires it immediately."""
        ttl = self._default_ttl if ttl is None else ttl
        self._sets += 1
        if ttl <= 0:
            self._cache.pop(key, None)
            return
        self._cache[key] = _Entry(value=value, ttl=ttl)

    def delete(self, key: str) -> bool:
        """Remove a key; returns True when something was removed."""
        if self._cache.pop(key, None) is None:
            return False
        self._deletes += 1
        return True

    def clear(self) -> None:
        removed = len(self._cache)
        self._cache.clear()
        self._deletes += removed
        logger.debug("Cache cleared", removed=removed)

    def has(self, key: str) -> bool:
        return key in self._cache

    def keys(self) -> List[str]:
        return list(self._cache.keys())

    def cleanup(self) -> int:
        """Purge expired entries and return how many were dropped."""
        expired = self._cache.expire() or []
        self._evictions += len(expired)
        return len(expired)

    def get_metrics(self) -> Dict[str, Any]:
        total = self._hits + self._misses
        return {
            "hit_rate": self._hits / total if total else 0.0,
            "total_requests": total,
            "hits": self._hits,
            "misses": self._misses,
            "sets": self._sets,
            "deletes": self._deletes,
            "evictions": self._evictions,
            "key_count": len(self._cache),
        }

    @staticmethod
    def create_key(*parts: Union[str, int, float, bool, None]) -> str:
        """Build a cache key from parts, e.g. ``create_key("pkg", "@types/node")``."""
        return ":".join(_KEY_UNSAFE.sub("_", str(part)) for part in parts)
