"""
Lyrics metadata normalization.

The upstream wraps every body in ``{"meta": ..., "response": {...}}``.
"""

from typing import Any, Dict, List


def _plain(description: Any) -> str:
    if isinstance(description, dict):
        return description.get("plain") or ""
    return ""


def normalize_song_hits(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    hits = payload["response"]["hits"]
    songs = []
    for hit in hits:
        result = hit["result"]
        artist = result.get("primary_artist") or {}
        songs.append({
            "id": result["id"],
            "title": result.get("title"),
            "artist": artist.get("name"),
            "artist_id": artist.get("id"),
            "url": result.get("url"),
            "song_art_image_url": result.get("song_art_image_url"),
            "header_image_url": result.get("header_image_thumbnail_url"),
        })
    return songs


def normalize_song(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Song metadata; full lyrics live only on the page at ``genius_url``."""
    song = payload["response"]["song"]
    artist = song.get("primary_artist") or {}
    album = song.get("album") or {}
    return {
        "id": song["id"],
        "title": song.get("title"),
        "artist": artist.get("name"),
        "artist_id": artist.get("id"),
        "album": album.get("name") or "Unknown",
        "release_date": song.get("release_date_for_display"),
        "song_art_image_url": song.get("song_art_image_url"),
        "header_image_url": song.get("header_image_url"),
        "url": song.get("url"),
        "description": _plain(song.get("description")),
        "lyrics_state": song.get("lyrics_state"),
        "genius_url": song.get("url"),
    }


def normalize_lyrics_artist(payload: Dict[str, Any]) -> Dict[str, Any]:
    artist = payload["response"]["artist"]
    return {
        "id": artist["id"],
        "name": artist.get("name"),
        "image_url": artist.get("image_url"),
        "header_image_url": artist.get("header_image_url"),
        "url": artist.get("url"),
        "followers_count": artist.get("followers_count"),
        "description": _plain(artist.get("description")),
    }
