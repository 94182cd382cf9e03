"""
Event listings normalization.
"""

from typing import Any, Dict, List

DEFAULT_EVENT_TIME = "19:00"


def normalize_event(event: Dict[str, Any], artist_name: str) -> Dict[str, Any]:
    """Map one upstream event onto the public event shape."""
    venue = event.get("venue") or {}
    offers = event.get("offers") or []
    event_datetime = event.get("datetime") or ""
    date_part, _, time_part = event_datetime.partition("T")

    ticket_url = event.get("url")
    if not ticket_url and offers:
        ticket_url = offers[0].get("url")

    return {
        "id": event.get("id"),
        "title": event.get("title") or f"{artist_name} Live",
        "datetime": event_datetime,
        "date": date_part,
        "time": time_part[:5] or DEFAULT_EVENT_TIME,
        "venue": {
            "name": venue.get("name"),
            "city": venue.get("city"),
            "region": venue.get("region"),
            "country": venue.get("country"),
            "location": f"{venue.get('city')}, {venue.get('country')}",
        },
        "lineup": event.get("lineup") or [artist_name],
        "offers": offers,
        "ticket_url": ticket_url or "#",
        "description": event.get("description") or f"Live concert at {venue.get('name')}",
    }


def normalize_events(payload: Any, artist_name: str) -> List[Dict[str, Any]]:
    """Upstream answers with a bare list; anything else means no events."""
    if not isinstance(payload, list):
        return []
    return [normalize_event(event, artist_name) for event in payload]


def normalize_events_artist(payload: Dict[str, Any]) -> Dict[str, Any]:
    image = payload.get("image_url") or payload.get("thumb_url")
    return {
        "name": payload["name"],
        "image": image,
        "image_url": image,
        "tracker_count": payload.get("tracker_count"),
        "upcoming_event_count": payload.get("upcoming_event_count"),
        "url": payload.get("url"),
        "facebook_page_url": payload.get("facebook_page_url"),
    }
