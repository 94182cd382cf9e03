"""
Scrobble service normalization.

Counts arrive as strings and images as a list of ``{"size", "#text"}``.
"""

import re
from typing import Any, Dict, List, Optional

_ANCHOR_RE = re.compile(r"<a[^>]*>.*?</a>", re.DOTALL)


def pick_image(images: Any, size: str) -> Optional[str]:
    for image in images or []:
        if image.get("size") == size:
            return image.get("#text") or None
    return None


def _to_int(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    return int(value)


def _as_list(value: Any) -> List[Any]:
    # Single results are returned as an object instead of a one-item list.
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    return list(value)


def normalize_artist_info(payload: Dict[str, Any]) -> Dict[str, Any]:
    artist = payload["artist"]
    stats = artist.get("stats") or {}
    bio = (artist.get("bio") or {}).get("summary") or ""
    tags = (artist.get("tags") or {}).get("tag")
    similar = (artist.get("similar") or {}).get("artist")
    return {
        "name": artist["name"],
        "listeners": _to_int(stats.get("listeners")),
        "playcount": _to_int(stats.get("playcount")),
        "bio": _ANCHOR_RE.sub("", bio),
        "image": pick_image(artist.get("image"), "extralarge"),
        "tags": [tag["name"] for tag in _as_list(tags)],
        "url": artist.get("url"),
        "similar": [
            {"name": item["name"], "url": item.get("url")}
            for item in _as_list(similar)[:5]
        ],
    }


def normalize_top_tracks(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    tracks = payload["toptracks"].get("track")
    return [
        {
            "name": track["name"],
            "playcount": _to_int(track.get("playcount")),
            "listeners": _to_int(track.get("listeners")),
            "artist": (track.get("artist") or {}).get("name"),
            "url": track.get("url"),
            "image": pick_image(track.get("image"), "large"),
        }
        for track in _as_list(tracks)
    ]


def normalize_similar_artists(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    artists = payload["similarartists"].get("artist")
    return [
        {
            "name": artist["name"],
            "match": float(artist["match"]) if artist.get("match") not in (None, "") else None,
            "url": artist.get("url"),
            "image": pick_image(artist.get("image"), "large"),
        }
        for artist in _as_list(artists)
    ]


def normalize_artist_search(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    matches = (payload.get("results") or {}).get("artistmatches") or {}
    return [
        {
            "name": artist["name"],
            "listeners": _to_int(artist.get("listeners")),
            "url": artist.get("url"),
            "image": pick_image(artist.get("image"), "large"),
        }
        for artist in _as_list(matches.get("artist"))
    ]


def normalize_track_info(payload: Dict[str, Any]) -> Dict[str, Any]:
    track = payload["track"]
    album = track.get("album") or {}
    tags = (track.get("toptags") or {}).get("tag")
    return {
        "name": track["name"],
        "artist": (track.get("artist") or {}).get("name"),
        "album": album.get("title") or "Unknown",
        "duration": _to_int(track.get("duration")),
        "listeners": _to_int(track.get("listeners")),
        "playcount": _to_int(track.get("playcount")),
        "tags": [tag["name"] for tag in _as_list(tags)],
        "url": track.get("url"),
        "image": pick_image(album.get("image"), "large"),
    }
