"""
Aggregator caching package.

In-process response cache, deterministic cache keys with fixed per-domain
TTLs, and the read-through orchestrator every metadata route goes through.
Nothing here is durable; a restart starts cold.
"""

from .expiring_cache import CacheEntry, ExpiringCache
from .keys import (
    ARTIST_INFO_TTL,
    EVENTS_TTL,
    LYRICS_TTL,
    TRACK_TTL,
    ResourceKind,
    build_cache_key,
)
from .cached_fetch import CachedFetchOrchestrator, CachedResult

__all__ = [
    "CacheEntry",
    "ExpiringCache",
    "ResourceKind",
    "build_cache_key",
    "EVENTS_TTL",
    "LYRICS_TTL",
    "ARTIST_INFO_TTL",
    "TRACK_TTL",
    "CachedFetchOrchestrator",
    "CachedResult",
]
