"""
Client-credentials bearer token lifecycle for the music catalog provider.
"""

import asyncio
import base64
import time
from dataclasses import dataclass
from typing import Dict, Optional, TYPE_CHECKING

from shared.errors import AuthError
from shared.logging import get_logger
from ..caching.expiring_cache import ExpiringCache
from .upstream_fetcher import UpstreamError, UpstreamFetcher, UpstreamRequest

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_EXPIRES_IN = 3600


@dataclass(frozen=True)
class BearerToken:
    """Process-wide bearer token for the catalog API."""

    value: str
    expires_at: float
    token_type: str = "Bearer"

    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.value}"}


class CatalogTokenManager:
    """Keep one shared client-credentials token fresh.

    The token lives in the cache for the upstream-declared lifetime minus
    ``safety_margin`` seconds, so it is replaced before it can expire
    mid-flight. Refreshes are serialized: callers that find the slot empty
    while a refresh is running wait for it and reuse its result.
    """

    TOKEN_CACHE_KEY = "catalog_token"

    def __init__(
        self,
        fetcher: UpstreamFetcher,
        client_id: Optional[str],
        client_secret: Optional[str],
        token_url: str,
        *,
        cache: Optional[ExpiringCache] = None,
        safety_margin: int = 100,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.fetcher = fetcher
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_url = token_url
        self.cache = cache or ExpiringCache("token")
        self.safety_margin = safety_margin
        self.metrics = metrics
        self.logger = get_logger("aggregator.token_manager")
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    async def get_token(self) -> BearerToken:
        """Return a live token, acquiring a new one if the slot is empty."""
        token = self.cache.get(self.TOKEN_CACHE_KEY)
        if token is not None:
            return token

        async with self._lock:
            token = self.cache.get(self.TOKEN_CACHE_KEY)
            if token is not None:
                return token
            return await self._acquire()

    def invalidate(self) -> None:
        """Drop the cached token, e.g. after the upstream rejected it."""
        if self.cache.delete(self.TOKEN_CACHE_KEY):
            self.logger.info("Catalog token invalidated")

    async def _acquire(self) -> BearerToken:
        if not self.configured:
            self.logger.error("catalog_token_error", reason="missing_client_credentials")
            self._record("error")
            raise AuthError("Catalog client credentials are not configured")

        credentials = base64.b64encode(
            f"{self.client_id}:{self.client_secret}".encode("utf-8")
        ).decode("ascii")
        request = UpstreamRequest(
            service="spotify_auth",
            method="POST",
            url=self.token_url,
            headers={"Authorization": f"Basic {credentials}"},
            body={"grant_type": "client_credentials"},
        )

        try:
            response = await self.fetcher.fetch(request)
        except UpstreamError as exc:
            self.logger.error(
                "catalog_token_error",
                status_code=exc.status_code,
                error=exc.message,
                upstream=exc.payload,
            )
            self._record("error")
            raise AuthError(
                "Failed to get catalog access token",
                details={"status_code": exc.status_code},
                error=exc.message,
            ) from exc

        payload = response.payload if isinstance(response.payload, dict) else {}
        access_token = payload.get("access_token")
        if not access_token:
            self.logger.error("catalog_token_error", reason="missing_access_token")
            self._record("error")
            raise AuthError("Token response did not contain an access token")

        try:
            expires_in = int(payload.get("expires_in", DEFAULT_EXPIRES_IN))
        except (TypeError, ValueError):
            expires_in = DEFAULT_EXPIRES_IN

        if expires_in > self.safety_margin:
            ttl = expires_in - self.safety_margin
        else:
            ttl = expires_in / 2

        token = BearerToken(
            value=access_token,
            expires_at=time.time() + expires_in,
            token_type=payload.get("token_type", "Bearer"),
        )
        self.cache.set(self.TOKEN_CACHE_KEY, token, ttl)
        self._record("success")
        self.logger.info("Catalog token refreshed", expires_in=expires_in, cache_ttl=ttl)
        return token

    def _record(self, status: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("token_refresh_total", status=status)
