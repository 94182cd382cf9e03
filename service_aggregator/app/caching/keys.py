"""
Cache key construction and per-domain TTLs.
"""

from enum import Enum
from typing import Any

EVENTS_TTL = 6 * 60 * 60
LYRICS_TTL = 7 * 24 * 60 * 60
ARTIST_INFO_TTL = 24 * 60 * 60
TRACK_TTL = 24 * 60 * 60


class ResourceKind(str, Enum):
    """Logical resource kinds served through the response cache."""

    EVENTS = "events"
    EVENTS_ARTIST = "events_artist"
    SONG = "song"
    LYRICS_ARTIST = "lyrics_artist"
    ARTIST_INFO = "artist_info"
    ARTIST_TOP_TRACKS = "artist_top_tracks"
    ARTIST_SIMILAR = "artist_similar"
    TRACK_INFO = "track_info"
    CATALOG_TRACK = "track"
    CATALOG_ARTIST = "catalog_artist"
    CATALOG_TOP_TRACKS = "catalog_top_tracks"

    @property
    def case_insensitive(self) -> bool:
        """Name-keyed upstreams ignore case; id-keyed ones are opaque."""
        return self in _NAME_KEYED


_NAME_KEYED = frozenset({
    ResourceKind.EVENTS,
    ResourceKind.EVENTS_ARTIST,
    ResourceKind.ARTIST_INFO,
    ResourceKind.ARTIST_TOP_TRACKS,
    ResourceKind.ARTIST_SIMILAR,
    ResourceKind.TRACK_INFO,
})


def build_cache_key(kind: ResourceKind, *parts: Any) -> str:
    """Build a deterministic key from a resource kind and identifier parts.

    Identifiers for name-keyed kinds are stripped and case-folded so that
    ``Coldplay`` and ``coldplay`` share one entry; opaque ids are kept verbatim.
    """
    normalized = []
    for part in parts:
        text = str(part)
        if kind.case_insensitive:
            text = text.strip().casefold()
        normalized.append(text)
    return ":".join([kind.value] + normalized)
