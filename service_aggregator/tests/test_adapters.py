"""
Unit tests for the upstream provider clients.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from service_aggregator.app.adapters import (
    BearerToken,
    CatalogClient,
    EventsClient,
    LyricsClient,
    ScrobbleClient,
    UpstreamError,
    UpstreamResponse,
)
from shared.errors import AuthError


@pytest.fixture
def fetcher():
    fetcher = MagicMock()
    fetcher.fetch = AsyncMock(return_value=UpstreamResponse(status_code=200, payload={}))
    return fetcher


class TestEventsClient:
    """Test cases for EventsClient."""

    @pytest.mark.asyncio
    async def test_artist_name_is_quoted(self, fetcher):
        fetcher.fetch.return_value = UpstreamResponse(status_code=200, payload=[])
        client = EventsClient(fetcher, "musij_platform", "https://rest.example.com")

        await client.get_artist_events("AC/DC")

        request = fetcher.fetch.await_args.args[0]
        assert request.url == "https://rest.example.com/artists/AC%2FDC/events"
        assert request.params == {"app_id": "musij_platform"}

    @pytest.mark.asyncio
    async def test_not_found_error_message_maps_to_404(self, fetcher):
        fetcher.fetch.return_value = UpstreamResponse(
            status_code=200, payload={"errorMessage": "[NotFound] The artist was not found"}
        )
        client = EventsClient(fetcher, "musij_platform", "https://rest.example.com")

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_artist("Nobody")

        assert exc_info.value.is_not_found


class TestLyricsClient:
    """Test cases for LyricsClient."""

    @pytest.mark.asyncio
    async def test_bearer_header(self, fetcher):
        client = LyricsClient(fetcher, "genius-token", "https://api.example.com")

        await client.search("yellow")

        request = fetcher.fetch.await_args.args[0]
        assert request.headers == {"Authorization": "Bearer genius-token"}
        assert request.params == {"q": "yellow"}

    @pytest.mark.asyncio
    async def test_missing_token_raises(self, fetcher):
        client = LyricsClient(fetcher, None, "https://api.example.com")

        with pytest.raises(AuthError):
            await client.get_song("1")
        fetcher.fetch.assert_not_awaited()


class TestScrobbleClient:
    """Test cases for ScrobbleClient."""

    @pytest.mark.asyncio
    async def test_method_params(self, fetcher):
        client = ScrobbleClient(fetcher, "lastfm-key", "http://ws.example.com/2.0/")

        await client.get_top_tracks("Muse", 5)

        params = fetcher.fetch.await_args.args[0].params
        assert params == {
            "method": "artist.gettoptracks",
            "api_key": "lastfm-key",
            "format": "json",
            "artist": "Muse",
            "limit": 5,
        }

    @pytest.mark.asyncio
    async def test_error_six_is_not_found(self, fetcher):
        fetcher.fetch.return_value = UpstreamResponse(
            status_code=200, payload={"error": 6, "message": "The artist you supplied could not be found"}
        )
        client = ScrobbleClient(fetcher, "lastfm-key", "http://ws.example.com/2.0/")

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_artist_info("Nobody")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "The artist you supplied could not be found"

    @pytest.mark.asyncio
    async def test_other_error_payload_keeps_status(self, fetcher):
        fetcher.fetch.side_effect = UpstreamError(
            "lastfm", "Unexpected status 403", status_code=403, payload={"error": 10, "message": "Invalid API key"}
        )
        client = ScrobbleClient(fetcher, "bad-key", "http://ws.example.com/2.0/")

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_similar("Muse")

        assert exc_info.value.status_code == 403


class TestCatalogClient:
    """Test cases for CatalogClient."""

    @pytest.fixture
    def token_manager(self):
        manager = MagicMock()
        manager.get_token = AsyncMock(return_value=BearerToken(value="tok", expires_at=0))
        return manager

    @pytest.mark.asyncio
    async def test_recommendations_drop_missing_seeds(self, fetcher, token_manager):
        client = CatalogClient(fetcher, token_manager, "https://api.example.com/v1", market="ID")

        await client.get_recommendations(seed_tracks="t1", limit=5)

        request = fetcher.fetch.await_args.args[0]
        assert request.url == "https://api.example.com/v1/recommendations"
        assert request.headers == {"Authorization": "Bearer tok"}
        assert request.params == {"seed_tracks": "t1", "limit": 5, "market": "ID"}

    @pytest.mark.asyncio
    async def test_unauthorized_invalidates_token(self, fetcher, token_manager):
        fetcher.fetch.side_effect = UpstreamError("spotify", "Unexpected status 401", status_code=401)
        client = CatalogClient(fetcher, token_manager, "https://api.example.com/v1")

        with pytest.raises(UpstreamError):
            await client.get_track("abc")

        token_manager.invalidate.assert_called_once()
