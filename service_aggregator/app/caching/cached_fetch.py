"""
Read-through caching for upstream metadata lookups.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TYPE_CHECKING

from shared.errors import NotFoundError, UpstreamServiceError
from shared.logging import get_logger
from ..adapters.upstream_fetcher import UpstreamError
from .expiring_cache import ExpiringCache

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


FetchFn = Callable[[], Awaitable[Any]]
TransformFn = Callable[[Any], Any]

# Upstream payloads that do not match the expected shape surface as these.
MALFORMED_PAYLOAD_ERRORS = (KeyError, TypeError, ValueError, AttributeError, IndexError)


def _identity(value: Any) -> Any:
    return value


@dataclass
class CachedResult:
    """Outcome of a (cached) upstream lookup."""

    data: Any
    from_cache: bool
    not_found: bool = False

    @property
    def is_empty(self) -> bool:
        return self.not_found or self.data is None or self.data == []


class CachedFetchOrchestrator:
    """Compose the response cache and an upstream fetch into one lookup.

    A cache hit never calls ``fetch_fn``. On a miss the raw payload is
    normalized with ``transform`` and stored under ``key``. Upstream
    "not found" comes back as an empty result rather than an error; every
    other upstream failure is raised as ``UpstreamServiceError``.
    """

    def __init__(self, cache: ExpiringCache, metrics: Optional["MetricsCollector"] = None):
        self.cache = cache
        self.metrics = metrics
        self.logger = get_logger("aggregator.cached_fetch")

    async def cached_fetch(
        self,
        key: str,
        ttl: float,
        fetch_fn: FetchFn,
        transform: TransformFn = _identity,
        *,
        failure_message: str = "Upstream service error",
    ) -> CachedResult:
        kind = key.split(":", 1)[0]
        cached = self.cache.get(key)
        if cached is not None:
            self._record("cache_hits_total", kind)
            return CachedResult(data=cached, from_cache=True)

        self._record("cache_misses_total", kind)
        result = await self.fetch(fetch_fn, transform, failure_message=failure_message)
        if not result.is_empty:
            self.cache.set(key, result.data, ttl)
            if self.metrics:
                self.metrics.set_gauge("cache_entries", len(self.cache))
        return result

    async def fetch(
        self,
        fetch_fn: FetchFn,
        transform: TransformFn = _identity,
        *,
        failure_message: str = "Upstream service error",
    ) -> CachedResult:
        """Fetch and normalize without touching the cache."""
        try:
            raw = await fetch_fn()
        except NotFoundError:
            return CachedResult(data=None, from_cache=False, not_found=True)
        except UpstreamError as exc:
            if exc.is_not_found:
                self.logger.info("Upstream resource not found", service=exc.service, url=exc.url)
                return CachedResult(data=None, from_cache=False, not_found=True)
            raise UpstreamServiceError(
                exc.service,
                failure_message,
                details={"status_code": exc.status_code, "upstream": exc.payload},
                error=exc.message,
            ) from exc

        try:
            data = transform(raw)
        except MALFORMED_PAYLOAD_ERRORS as exc:
            self.logger.error("Malformed upstream payload", error=str(exc))
            raise UpstreamServiceError(
                "upstream",
                failure_message,
                details={"reason": "malformed_payload"},
                error=str(exc),
            ) from exc

        return CachedResult(data=data, from_cache=False)

    def _record(self, metric_name: str, kind: str) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, resource_kind=kind)
