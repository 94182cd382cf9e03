"""
Scrobble service client (Last.fm).
"""

from typing import Any, Optional

from shared.errors import AuthError
from shared.logging import get_logger
from .upstream_fetcher import UpstreamError, UpstreamFetcher, UpstreamRequest

# Last.fm reports unknown artists/tracks as error 6 ("Invalid parameters").
LASTFM_NOT_FOUND = 6


class ScrobbleClient:
    """Fetch raw payloads from the single-endpoint scrobble API."""

    SERVICE = "lastfm"

    def __init__(self, fetcher: UpstreamFetcher, api_key: Optional[str], base_url: str):
        self.fetcher = fetcher
        self.api_key = api_key
        self.base_url = base_url
        self.logger = get_logger("aggregator.scrobble_client")

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def get_artist_info(self, artist: str) -> Any:
        return await self._call("artist.getinfo", artist=artist)

    async def get_top_tracks(self, artist: str, limit: int = 10) -> Any:
        return await self._call("artist.gettoptracks", artist=artist, limit=limit)

    async def get_similar(self, artist: str, limit: int = 10) -> Any:
        return await self._call("artist.getsimilar", artist=artist, limit=limit)

    async def search_artists(self, query: str, limit: int = 10) -> Any:
        return await self._call("artist.search", artist=query, limit=limit)

    async def get_track_info(self, artist: str, track: str) -> Any:
        return await self._call("track.getInfo", artist=artist, track=track)

    async def _call(self, method: str, **params: Any) -> Any:
        if not self.configured:
            raise AuthError("Scrobble API key is not configured")

        request = UpstreamRequest(
            service=self.SERVICE,
            method="GET",
            url=self.base_url,
            params={"method": method, "api_key": self.api_key, "format": "json", **params},
        )
        try:
            response = await self.fetcher.fetch(request)
        except UpstreamError as exc:
            if isinstance(exc.payload, dict) and "error" in exc.payload:
                raise self._error_from_payload(exc.payload, exc.status_code) from exc
            raise

        payload = response.payload
        if isinstance(payload, dict) and "error" in payload:
            raise self._error_from_payload(payload, response.status_code)
        return payload

    def _error_from_payload(self, payload: dict, status_code: Optional[int]) -> UpstreamError:
        code = payload.get("error")
        message = payload.get("message") or "Scrobble API error"
        if code == LASTFM_NOT_FOUND:
            status_code = 404
        elif status_code is None or status_code < 400:
            status_code = 502
        self.logger.info("Scrobble API error payload", code=code, message=message)
        return UpstreamError(
            self.SERVICE, message, status_code=status_code, payload=payload, url=self.base_url
        )
