"""
Adapters package for the Aggregator Service.

Contains the outbound transport and one thin client per upstream provider
(event listings, lyrics metadata, scrobbles, music catalog, payments).
These adapters encapsulate:

- Base URLs, credentials and request shapes
- The catalog bearer-token lifecycle
- Classification of upstream failures into ``UpstreamError``

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .upstream_fetcher import UpstreamError, UpstreamFetcher, UpstreamRequest, UpstreamResponse
from .token_manager import BearerToken, CatalogTokenManager
from .events_client import EventsClient
from .lyrics_client import LyricsClient
from .scrobble_client import ScrobbleClient
from .catalog_client import CatalogClient
from .payment_client import PaymentClient

__all__ = [
    "UpstreamError",
    "UpstreamFetcher",
    "UpstreamRequest",
    "UpstreamResponse",
    "BearerToken",
    "CatalogTokenManager",
    "EventsClient",
    "LyricsClient",
    "ScrobbleClient",
    "CatalogClient",
    "PaymentClient",
]
