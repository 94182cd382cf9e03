"""
Music catalog normalization.
"""

from typing import Any, Dict, List, Optional


def _first_image(images: Any) -> Optional[str]:
    if images:
        return images[0].get("url")
    return None


def normalize_track(track: Dict[str, Any], *, detailed: bool = False) -> Dict[str, Any]:
    """Public track shape; ``detailed`` adds album release date and popularity."""
    album = track.get("album") or {}
    artists = track.get("artists") or []
    data = {
        "id": track["id"],
        "name": track.get("name"),
        "artist": artists[0].get("name") if artists else None,
        "album": album.get("name"),
        "duration_ms": track.get("duration_ms"),
        "preview_url": track.get("preview_url"),
        "image": _first_image(album.get("images")),
        "spotify_url": (track.get("external_urls") or {}).get("spotify"),
    }
    if detailed:
        data["release_date"] = album.get("release_date")
        data["popularity"] = track.get("popularity")
    return data


def normalize_track_detail(payload: Dict[str, Any]) -> Dict[str, Any]:
    return normalize_track(payload, detailed=True)


def normalize_search_tracks(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [normalize_track(track) for track in payload["tracks"]["items"]]


def normalize_track_list(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Recommendations answer with ``{"tracks": [...]}``."""
    return [normalize_track(track) for track in payload["tracks"]]


def normalize_top_tracks(payload: Dict[str, Any]) -> List[Dict[str, Any]]:
    tracks = []
    for track in payload["tracks"]:
        data = normalize_track(track)
        data["popularity"] = track.get("popularity")
        tracks.append(data)
    return tracks


def normalize_artist(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": payload["id"],
        "name": payload.get("name"),
        "genres": payload.get("genres") or [],
        "popularity": payload.get("popularity"),
        "followers": (payload.get("followers") or {}).get("total"),
        "image": _first_image(payload.get("images")),
        "spotify_url": (payload.get("external_urls") or {}).get("spotify"),
    }
