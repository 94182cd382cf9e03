"""
Lyrics metadata client (Genius).
"""

from typing import Any, Dict, Optional

from shared.errors import AuthError
from .upstream_fetcher import UpstreamFetcher, UpstreamRequest


class LyricsClient:
    """Fetch raw song and artist payloads; the upstream never returns lyrics text."""

    SERVICE = "genius"

    def __init__(self, fetcher: UpstreamFetcher, access_token: Optional[str], base_url: str):
        self.fetcher = fetcher
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")

    @property
    def configured(self) -> bool:
        return bool(self.access_token)

    async def search(self, query: str) -> Any:
        return await self._get("/search", {"q": query})

    async def get_song(self, song_id: str) -> Any:
        return await self._get(f"/songs/{song_id}")

    async def get_artist(self, artist_id: str) -> Any:
        return await self._get(f"/artists/{artist_id}")

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if not self.configured:
            raise AuthError("Lyrics access token is not configured")

        response = await self.fetcher.fetch(UpstreamRequest(
            service=self.SERVICE,
            method="GET",
            url=f"{self.base_url}{path}",
            headers={"Authorization": f"Bearer {self.access_token}"},
            params=params or {},
        ))
        return response.payload
