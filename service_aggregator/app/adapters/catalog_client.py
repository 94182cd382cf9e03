"""
Music catalog client (Spotify Web API).
"""

from typing import Any, Dict, Optional

from shared.logging import get_logger
from .token_manager import CatalogTokenManager
from .upstream_fetcher import UpstreamError, UpstreamFetcher, UpstreamRequest


class CatalogClient:
    """Fetch raw catalog payloads using the shared client-credentials token."""

    SERVICE = "spotify"

    def __init__(
        self,
        fetcher: UpstreamFetcher,
        token_manager: CatalogTokenManager,
        base_url: str,
        market: str = "ID",
    ):
        self.fetcher = fetcher
        self.token_manager = token_manager
        self.base_url = base_url.rstrip("/")
        self.market = market
        self.logger = get_logger("aggregator.catalog_client")

    async def search_tracks(self, query: str, limit: int = 10) -> Any:
        return await self._get("/search", {"q": query, "type": "track", "limit": limit, "market": self.market})

    async def get_track(self, track_id: str) -> Any:
        return await self._get(f"/tracks/{track_id}", {"market": self.market})

    async def get_recommendations(
        self,
        seed_tracks: Optional[str] = None,
        seed_artists: Optional[str] = None,
        limit: int = 10,
    ) -> Any:
        params = {
            "seed_tracks": seed_tracks,
            "seed_artists": seed_artists,
            "limit": limit,
            "market": self.market,
        }
        return await self._get("/recommendations", params)

    async def get_artist(self, artist_id: str) -> Any:
        return await self._get(f"/artists/{artist_id}")

    async def get_artist_top_tracks(self, artist_id: str) -> Any:
        return await self._get(f"/artists/{artist_id}/top-tracks", {"market": self.market})

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        token = await self.token_manager.get_token()
        request = UpstreamRequest(
            service=self.SERVICE,
            method="GET",
            url=f"{self.base_url}{path}",
            headers=token.authorization_header(),
            params={key: value for key, value in (params or {}).items() if value is not None},
        )
        try:
            response = await self.fetcher.fetch(request)
        except UpstreamError as exc:
            if exc.status_code == 401:
                self.logger.warning("Catalog rejected bearer token", path=path)
                self.token_manager.invalidate()
            raise
        return response.payload
