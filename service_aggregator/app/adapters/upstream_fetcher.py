"""
Outbound HTTP transport shared by every upstream client.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, TYPE_CHECKING

import httpx

from shared.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


@dataclass
class UpstreamRequest:
    """Descriptor for one outbound call to a named external API."""

    service: str
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    body: Any = None
    json_body: Any = None


@dataclass
class UpstreamResponse:
    """Raw upstream response; ``payload`` is decoded JSON when possible."""

    status_code: int
    payload: Any
    headers: Dict[str, str] = field(default_factory=dict)


class UpstreamError(Exception):
    """Classified upstream failure.

    ``status_code`` is set when the upstream answered; it is None for
    transport failures (timeout, DNS, refused connection), in which case
    ``message`` carries the local reason.
    """

    def __init__(
        self,
        service: str,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Any = None,
        url: Optional[str] = None,
    ):
        self.service = service
        self.message = message
        self.status_code = status_code
        self.payload = payload
        self.url = url
        super().__init__(f"{service}: {message}")

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_transport_error(self) -> bool:
        return self.status_code is None


class UpstreamFetcher:
    """Thin transport shim over ``httpx.AsyncClient``.

    No retries happen here; callers own retry policy. Every call is bounded
    by ``timeout``.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        *,
        client: Optional[httpx.AsyncClient] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger("aggregator.upstream_fetcher")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def fetch(self, request: UpstreamRequest) -> UpstreamResponse:
        """Perform the call; raise ``UpstreamError`` for any non-2xx outcome."""
        start = time.perf_counter()
        try:
            response = await self._client.request(
                request.method,
                request.url,
                headers=request.headers or None,
                params=request.params or None,
                data=request.body,
                json=request.json_body,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            self._record(request.service, "timeout", start)
            raise UpstreamError(
                request.service, f"Request timed out: {exc}", url=request.url
            ) from exc
        except httpx.HTTPError as exc:
            self._record(request.service, "transport_error", start)
            raise UpstreamError(
                request.service, f"Connection failed: {exc}", url=request.url
            ) from exc

        payload = self._decode(response)
        if response.is_success:
            self._record(request.service, "success", start)
            return UpstreamResponse(
                status_code=response.status_code,
                payload=payload,
                headers=dict(response.headers),
            )

        self._record(request.service, f"http_{response.status_code}", start)
        self.logger.warning(
            "upstream_request_failed",
            service=request.service,
            url=request.url,
            status_code=response.status_code,
            response=payload,
        )
        raise UpstreamError(
            request.service,
            f"Unexpected status {response.status_code}",
            status_code=response.status_code,
            payload=payload,
            url=request.url,
        )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def _record(self, service: str, outcome: str, start: float) -> None:
        if not self.metrics:
            return
        self.metrics.increment_counter("upstream_requests_total", service=service, outcome=outcome)
        self.metrics.observe_histogram(
            "upstream_request_duration_seconds", time.perf_counter() - start, service=service
        )
