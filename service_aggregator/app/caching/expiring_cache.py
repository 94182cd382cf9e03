"""
In-process expiring key-value cache.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from shared.logging import get_logger


@dataclass(frozen=True)
class CacheEntry:
    """A cached value and the instant it stops being visible."""

    value: Any
    expires_at: float

    def is_live(self, now: float) -> bool:
        return now < self.expires_at


class ExpiringCache:
    """String-keyed cache with a per-entry TTL.

    Expired entries are logically absent: ``get`` and ``has`` evict them on
    access and ``sweep`` drops every expired entry in one pass. ``set`` replaces
    the whole entry, so concurrent writers on one key are last-write-wins.
    """

    def __init__(
        self,
        name: str = "default",
        default_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self.logger = get_logger(f"aggregator.cache.{name}")

    def get(self, key: str) -> Optional[Any]:
        """Return the live value for ``key`` or None."""
        entry = self._live_entry(key)
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)
        self.logger.debug("Cached value", key=key, ttl=ttl)

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def sweep(self) -> int:
        """Evict every expired entry; returns how many were dropped."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_live(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            self.logger.debug("Swept expired entries", count=len(expired))
        return len(expired)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
        }

    def __len__(self) -> int:
        return len(self._entries)

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_live(self._clock()):
            del self._entries[key]
            return None
        return entry
