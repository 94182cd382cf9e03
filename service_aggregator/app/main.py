"""
Aggregator service for the Musij backend.

Fronts the event listings, lyrics metadata, scrobble, music catalog and
payment providers behind one JSON interface.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import NotFoundError, ValidationError
from shared.logging import set_user_context

from .adapters import (
    CatalogClient,
    CatalogTokenManager,
    EventsClient,
    LyricsClient,
    PaymentClient,
    ScrobbleClient,
    UpstreamFetcher,
)
from .caching import (
    ARTIST_INFO_TTL,
    EVENTS_TTL,
    LYRICS_TTL,
    TRACK_TTL,
    CachedFetchOrchestrator,
    CachedResult,
    ExpiringCache,
    ResourceKind,
    build_cache_key,
)
from .normalization import catalog, events, lyrics, scrobble
from .payments import CheckoutService, CheckoutSessionStore, WebhookDispatcher, WebhookVerifier

SIGNATURE_HEADER = "stripe-signature"


class CheckoutRequest(BaseModel):
    """Checkout creation body; presence is validated by the checkout service."""

    model_config = ConfigDict(populate_by_name=True)

    plan_type: Optional[str] = Field(default=None, alias="planType")
    plan_name: Optional[str] = Field(default=None, alias="planName")
    amount: Optional[Decimal] = None
    user_id: Optional[str] = Field(default=None, alias="userId")


def _require(value: Optional[str], message: str) -> str:
    if not value or not value.strip():
        raise ValidationError(message)
    return value


def _respond(result: CachedResult, *, empty: Any = None, empty_message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    """Wrap a lookup result in the success envelope."""
    if result.is_empty:
        body: Dict[str, Any] = {"success": True, "data": empty}
        if empty_message:
            body["message"] = empty_message
        return body
    return {"success": True, "data": result.data, "from_cache": result.from_cache, **extra}


class AggregatorService(BaseService):
    """Metadata aggregator and checkout service."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        fetcher: Optional[UpstreamFetcher] = None,
        payment_client: Optional[PaymentClient] = None,
        response_cache: Optional[ExpiringCache] = None,
        token_cache: Optional[ExpiringCache] = None,
        session_store: Optional[CheckoutSessionStore] = None,
    ):
        super().__init__("aggregator", config)

        self.fetcher = fetcher or UpstreamFetcher(self.config.upstream_timeout, metrics=self.metrics)
        self.response_cache = response_cache or ExpiringCache("responses")
        self.orchestrator = CachedFetchOrchestrator(self.response_cache, metrics=self.metrics)

        self.token_manager = CatalogTokenManager(
            self.fetcher,
            self.config.spotify_client_id,
            self.config.spotify_client_secret,
            self.config.spotify_token_url,
            cache=token_cache or ExpiringCache("token"),
            safety_margin=self.config.token_safety_margin,
            metrics=self.metrics,
        )
        self.events_client = EventsClient(
            self.fetcher, self.config.bandsintown_app_id, self.config.bandsintown_api_url
        )
        self.lyrics_client = LyricsClient(
            self.fetcher, self.config.genius_access_token, self.config.genius_api_url
        )
        self.scrobble_client = ScrobbleClient(
            self.fetcher, self.config.lastfm_api_key, self.config.lastfm_api_url
        )
        self.catalog_client = CatalogClient(
            self.fetcher, self.token_manager, self.config.spotify_api_url, self.config.spotify_market
        )

        self.session_store = session_store or CheckoutSessionStore()
        self.payment_client = payment_client or PaymentClient(self.config.stripe_secret_key)
        self.checkout_service = CheckoutService(
            self.payment_client,
            self.session_store,
            frontend_url=self.config.frontend_url,
            currency=self.config.checkout_currency,
        )
        self.webhook_verifier = WebhookVerifier(self.config.stripe_webhook_secret)
        self.webhook_dispatcher = WebhookDispatcher(self.session_store, metrics=self.metrics)

        self._sweep_task: Optional[asyncio.Task] = None

        @self.app.on_event("startup")
        async def _startup():
            self._sweep_task = asyncio.create_task(self._sweep_caches())

        @self.app.on_event("shutdown")
        async def _shutdown():
            if self._sweep_task:
                self._sweep_task.cancel()
            await self.fetcher.close()

        prefix = self.config.api_prefix.rstrip("/")
        self._setup_events_routes(prefix)
        self._setup_lyrics_routes(prefix)
        self._setup_scrobble_routes(prefix)
        self._setup_catalog_routes(prefix)
        self._setup_payment_routes(prefix)
        if prefix:
            self.app.add_api_route(f"{prefix}/health", self._health_payload, methods=["GET"])

        self.app.state.aggregator_service = self

    async def _health_payload(self) -> Dict[str, Any]:
        return {
            "status": "OK",
            "message": "Musij Backend API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "apis": {
                "stripe": self.payment_client.configured,
                "spotify": self.token_manager.configured,
                "genius": self.lyrics_client.configured,
                "lastfm": self.scrobble_client.configured,
                "bandsintown": bool(self.config.bandsintown_app_id),
            },
            "cache": self.response_cache.get_stats(),
        }

    async def _sweep_caches(self) -> None:
        """Periodically drop expired entries from the response cache."""
        while True:
            await asyncio.sleep(self.config.cache_sweep_interval)
            dropped = self.response_cache.sweep()
            self.metrics.set_gauge("cache_entries", len(self.response_cache))
            if dropped:
                self.logger.info("Response cache swept", dropped=dropped, remaining=len(self.response_cache))

    def _setup_events_routes(self, prefix: str):
        """Event listings routes."""
        router = APIRouter(prefix=f"{prefix}/events")

        @router.get("/artist/{artist_name}")
        async def get_artist_events(artist_name: str):
            """Upcoming events for an artist."""
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.EVENTS, artist_name),
                EVENTS_TTL,
                lambda: self.events_client.get_artist_events(artist_name),
                lambda payload: events.normalize_events(payload, artist_name),
                failure_message="Failed to get events",
            )
            message = "No events found for this artist" if result.not_found else "No upcoming events found"
            return _respond(result, empty=[], empty_message=message)

        @router.get("/artist/{artist_name}/info")
        async def get_events_artist(artist_name: str):
            """Artist profile from the event listings provider."""
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.EVENTS_ARTIST, artist_name),
                ARTIST_INFO_TTL,
                lambda: self.events_client.get_artist(artist_name),
                events.normalize_events_artist,
                failure_message="Failed to get artist info",
            )
            return _respond(result, empty_message="Artist not found")

        self.app.include_router(router)

    def _setup_lyrics_routes(self, prefix: str):
        """Lyrics metadata routes."""
        router = APIRouter(prefix=f"{prefix}/lyrics")

        @router.get("/test")
        async def lyrics_test():
            """Report whether the lyrics token is configured."""
            token = self.config.genius_access_token
            return {
                "success": True,
                "message": "Genius API route is working",
                "token_exists": bool(token),
                "token_length": len(token) if token else 0,
                "token_preview": f"{token[:10]}..." if token else "NOT FOUND",
            }

        @router.get("/search")
        async def search_songs(q: Optional[str] = Query(None)):
            """Search songs by free text."""
            query = _require(q, 'Query parameter "q" is required')
            result = await self.orchestrator.fetch(
                lambda: self.lyrics_client.search(query),
                lyrics.normalize_song_hits,
                failure_message="Failed to search songs",
            )
            return _respond(result, empty=[], empty_message="No songs found")

        @router.get("/song/{song_id}")
        async def get_song(song_id: str):
            """Song metadata; lyrics text is only available at genius_url."""
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.SONG, song_id),
                LYRICS_TTL,
                lambda: self.lyrics_client.get_song(song_id),
                lyrics.normalize_song,
                failure_message="Failed to get song details",
            )
            return _respond(result, empty_message="Song not found", note="Full lyrics available at genius_url")

        @router.get("/artist/{artist_id}")
        async def get_lyrics_artist(artist_id: str):
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.LYRICS_ARTIST, artist_id),
                LYRICS_TTL,
                lambda: self.lyrics_client.get_artist(artist_id),
                lyrics.normalize_lyrics_artist,
                failure_message="Failed to get artist info",
            )
            return _respond(result, empty_message="Artist not found")

        self.app.include_router(router)

    def _setup_scrobble_routes(self, prefix: str):
        """Scrobble routes. Unknown artists/tracks are an explicit 404 here."""
        router = APIRouter(prefix=f"{prefix}/artists")

        def _found(result: CachedResult, message: str) -> Dict[str, Any]:
            if result.not_found:
                raise NotFoundError(message)
            return _respond(result, empty=[])

        @router.get("/info/{artist_name}")
        async def get_artist_info(artist_name: str):
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.ARTIST_INFO, artist_name),
                ARTIST_INFO_TTL,
                lambda: self.scrobble_client.get_artist_info(artist_name),
                scrobble.normalize_artist_info,
                failure_message="Failed to get artist info",
            )
            return _found(result, "Artist not found")

        @router.get("/top-tracks/{artist_name}")
        async def get_top_tracks(artist_name: str, limit: int = Query(10, ge=1, le=100)):
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.ARTIST_TOP_TRACKS, artist_name, limit),
                ARTIST_INFO_TTL,
                lambda: self.scrobble_client.get_top_tracks(artist_name, limit),
                scrobble.normalize_top_tracks,
                failure_message="Failed to get top tracks",
            )
            return _found(result, "Artist not found")

        @router.get("/similar/{artist_name}")
        async def get_similar(artist_name: str, limit: int = Query(10, ge=1, le=100)):
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.ARTIST_SIMILAR, artist_name, limit),
                ARTIST_INFO_TTL,
                lambda: self.scrobble_client.get_similar(artist_name, limit),
                scrobble.normalize_similar_artists,
                failure_message="Failed to get similar artists",
            )
            return _found(result, "Artist not found")

        @router.get("/search")
        async def search_artists(q: Optional[str] = Query(None), limit: int = Query(10, ge=1, le=100)):
            query = _require(q, 'Query parameter "q" is required')
            result = await self.orchestrator.fetch(
                lambda: self.scrobble_client.search_artists(query, limit),
                scrobble.normalize_artist_search,
                failure_message="Failed to search artists",
            )
            return _respond(result, empty=[])

        @router.get("/track-info")
        async def get_track_info(artist: Optional[str] = Query(None), track: Optional[str] = Query(None)):
            if not artist or not track:
                raise ValidationError("Both artist and track parameters are required")
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.TRACK_INFO, artist, track),
                TRACK_TTL,
                lambda: self.scrobble_client.get_track_info(artist, track),
                scrobble.normalize_track_info,
                failure_message="Failed to get track info",
            )
            return _found(result, "Track not found")

        self.app.include_router(router)

    def _setup_catalog_routes(self, prefix: str):
        """Music catalog routes; all of them need the catalog bearer token."""
        router = APIRouter(prefix=f"{prefix}/music")

        @router.get("/search")
        async def search_tracks(q: Optional[str] = Query(None), limit: int = Query(10, ge=1, le=50)):
            query = _require(q, 'Query parameter "q" is required')
            result = await self.orchestrator.fetch(
                lambda: self.catalog_client.search_tracks(query, limit),
                catalog.normalize_search_tracks,
                failure_message="Failed to search tracks",
            )
            return _respond(result, empty=[])

        @router.get("/track/{track_id}")
        async def get_track(track_id: str):
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.CATALOG_TRACK, track_id),
                TRACK_TTL,
                lambda: self.catalog_client.get_track(track_id),
                catalog.normalize_track_detail,
                failure_message="Failed to get track details",
            )
            return _respond(result, empty_message="Track not found")

        @router.get("/recommendations")
        async def get_recommendations(
            seed_tracks: Optional[str] = Query(None),
            seed_artists: Optional[str] = Query(None),
            limit: int = Query(10, ge=1, le=100),
        ):
            if not seed_tracks and not seed_artists:
                raise ValidationError("At least one of seed_tracks or seed_artists is required")
            result = await self.orchestrator.fetch(
                lambda: self.catalog_client.get_recommendations(seed_tracks, seed_artists, limit),
                catalog.normalize_track_list,
                failure_message="Failed to get recommendations",
            )
            return _respond(result, empty=[])

        @router.get("/artist/{artist_id}")
        async def get_catalog_artist(artist_id: str):
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.CATALOG_ARTIST, artist_id),
                ARTIST_INFO_TTL,
                lambda: self.catalog_client.get_artist(artist_id),
                catalog.normalize_artist,
                failure_message="Failed to get artist info",
            )
            return _respond(result, empty_message="Artist not found")

        @router.get("/artist/{artist_id}/top-tracks")
        async def get_catalog_top_tracks(artist_id: str):
            result = await self.orchestrator.cached_fetch(
                build_cache_key(ResourceKind.CATALOG_TOP_TRACKS, artist_id),
                TRACK_TTL,
                lambda: self.catalog_client.get_artist_top_tracks(artist_id),
                catalog.normalize_top_tracks,
                failure_message="Failed to get top tracks",
            )
            return _respond(result, empty=[])

        self.app.include_router(router)

    def _setup_payment_routes(self, prefix: str):
        """Checkout and webhook routes."""
        router = APIRouter(prefix=f"{prefix}/payment")

        @router.post("/create-checkout-session")
        async def create_checkout_session(payload: Optional[CheckoutRequest] = None):
            payload = payload or CheckoutRequest()
            set_user_context(payload.user_id)
            result = await self.checkout_service.create_session(
                payload.plan_type,
                payload.plan_name,
                payload.amount,
                payload.user_id,
            )
            return {
                "success": True,
                "sessionId": result.session_id,
                "url": result.url,
                "publishableKey": self.config.stripe_publishable_key,
            }

        @router.get("/session/{session_id}")
        async def get_checkout_session(session_id: str):
            status = await self.checkout_service.get_session_status(session_id)
            return {"success": True, **status}

        @router.post("/webhook")
        async def payment_webhook(request: Request):
            """Provider callback; verified against the raw body before anything else."""
            raw_body = await request.body()
            event = self.webhook_verifier.verify(raw_body, request.headers.get(SIGNATURE_HEADER))
            await self.webhook_dispatcher.dispatch(event)
            return {"received": True}

        self.app.include_router(router)


def create_app(config: Optional[ServiceConfig] = None):
    """Create FastAPI application."""
    service = AggregatorService(config)
    return service.app


def run():
    """Console entry point."""
    AggregatorService().run()


if __name__ == "__main__":
    run()
