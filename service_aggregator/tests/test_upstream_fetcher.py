"""
Unit tests for the outbound upstream transport.
"""

import pytest
import httpx

from service_aggregator.app.adapters.upstream_fetcher import (
    UpstreamError,
    UpstreamFetcher,
    UpstreamRequest,
)


def make_fetcher(handler) -> UpstreamFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return UpstreamFetcher(timeout=5.0, client=client)


class TestUpstreamFetcher:
    """Test cases for UpstreamFetcher."""

    @pytest.mark.asyncio
    async def test_success_decodes_json(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=[{"id": "1"}])

        fetcher = make_fetcher(handler)
        response = await fetcher.fetch(UpstreamRequest(
            service="bandsintown",
            method="GET",
            url="https://rest.example.com/artists/Muse/events",
            headers={"Authorization": "Bearer abc"},
            params={"app_id": "musij"},
        ))
        await fetcher.close()

        assert response.status_code == 200
        assert response.payload == [{"id": "1"}]
        assert seen["url"] == "https://rest.example.com/artists/Muse/events?app_id=musij"
        assert seen["auth"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_form_body_is_sent(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = request.content.decode()
            return httpx.Response(200, json={"ok": True})

        fetcher = make_fetcher(handler)
        await fetcher.fetch(UpstreamRequest(
            service="spotify_auth",
            method="POST",
            url="https://accounts.example.com/api/token",
            body={"grant_type": "client_credentials"},
        ))

        assert seen["body"] == "grant_type=client_credentials"

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self):
        fetcher = make_fetcher(lambda request: httpx.Response(404, json={"error": "missing"}))

        with pytest.raises(UpstreamError) as exc_info:
            await fetcher.fetch(UpstreamRequest(service="genius", method="GET", url="https://api.example.com/songs/1"))

        assert exc_info.value.status_code == 404
        assert exc_info.value.is_not_found
        assert exc_info.value.payload == {"error": "missing"}

    @pytest.mark.asyncio
    async def test_text_payload_is_kept(self):
        fetcher = make_fetcher(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(UpstreamError) as exc_info:
            await fetcher.fetch(UpstreamRequest(service="lastfm", method="GET", url="https://api.example.com/"))

        assert exc_info.value.payload == "boom"
        assert not exc_info.value.is_not_found

    @pytest.mark.asyncio
    async def test_transport_error_has_no_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = make_fetcher(handler)
        with pytest.raises(UpstreamError) as exc_info:
            await fetcher.fetch(UpstreamRequest(service="spotify", method="GET", url="https://api.example.com/v1/tracks/1"))

        assert exc_info.value.status_code is None
        assert exc_info.value.is_transport_error

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        fetcher = make_fetcher(handler)
        with pytest.raises(UpstreamError) as exc_info:
            await fetcher.fetch(UpstreamRequest(service="spotify", method="GET", url="https://api.example.com/v1/tracks/1"))

        assert exc_info.value.is_transport_error
        assert "timed out" in exc_info.value.message
