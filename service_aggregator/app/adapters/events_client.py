"""
Event listings client (Bandsintown).
"""

from typing import Any
from urllib.parse import quote

from shared.logging import get_logger
from .upstream_fetcher import UpstreamError, UpstreamFetcher, UpstreamRequest


class EventsClient:
    """Fetch raw artist and event payloads from the event listings API."""

    SERVICE = "bandsintown"

    def __init__(self, fetcher: UpstreamFetcher, app_id: str, base_url: str):
        self.fetcher = fetcher
        self.app_id = app_id
        self.base_url = base_url.rstrip("/")
        self.logger = get_logger("aggregator.events_client")

    async def get_artist_events(self, artist_name: str) -> Any:
        """Upcoming events for an artist; the upstream answers with a bare list."""
        return await self._get(f"/artists/{quote(artist_name, safe='')}/events")

    async def get_artist(self, artist_name: str) -> Any:
        """Artist profile."""
        return await self._get(f"/artists/{quote(artist_name, safe='')}")

    async def _get(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        response = await self.fetcher.fetch(UpstreamRequest(
            service=self.SERVICE,
            method="GET",
            url=url,
            params={"app_id": self.app_id},
        ))

        payload = response.payload
        # Unknown artists come back as 200 with an error message body.
        if isinstance(payload, dict) and payload.get("errorMessage"):
            message = str(payload["errorMessage"])
            status = 404 if "notfound" in message.replace(" ", "").lower() else 502
            raise UpstreamError(
                self.SERVICE, message, status_code=status, payload=payload, url=url
            )
        return payload
