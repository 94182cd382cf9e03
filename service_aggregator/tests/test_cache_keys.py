"""
Unit tests for cache key construction.
"""

from service_aggregator.app.caching.keys import (
    ARTIST_INFO_TTL,
    EVENTS_TTL,
    LYRICS_TTL,
    TRACK_TTL,
    ResourceKind,
    build_cache_key,
)


class TestCacheKeys:
    """Test cases for build_cache_key and ResourceKind."""

    def test_name_keyed_kinds_ignore_case_and_whitespace(self):
        assert build_cache_key(ResourceKind.EVENTS, "Coldplay") == build_cache_key(ResourceKind.EVENTS, " coldplay ")
        assert build_cache_key(ResourceKind.EVENTS, "Coldplay") == "events:coldplay"

    def test_id_keyed_kinds_are_verbatim(self):
        assert build_cache_key(ResourceKind.CATALOG_TRACK, "4uLU6hMCjMI75M1A2tKUQC") == "track:4uLU6hMCjMI75M1A2tKUQC"
        assert build_cache_key(ResourceKind.CATALOG_TRACK, "abc") != build_cache_key(ResourceKind.CATALOG_TRACK, "ABC")

    def test_multi_part_keys(self):
        key = build_cache_key(ResourceKind.TRACK_INFO, "Radiohead", "Creep")
        assert key == "track_info:radiohead:creep"
        assert build_cache_key(ResourceKind.ARTIST_TOP_TRACKS, "Muse", 10) == "artist_top_tracks:muse:10"

    def test_kinds_do_not_collide(self):
        assert build_cache_key(ResourceKind.EVENTS, "muse") != build_cache_key(ResourceKind.ARTIST_INFO, "muse")

    def test_domain_ttls(self):
        assert EVENTS_TTL == 21600
        assert LYRICS_TTL == 604800
        assert ARTIST_INFO_TTL == 86400
        assert TRACK_TTL == 86400
