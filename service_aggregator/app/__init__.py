"""
Aggregator Service package for the Musij backend.

The aggregator fronts the browser client, providing:
- Event listings, lyrics metadata, scrobble and catalog lookups
- A read-through response cache with per-resource TTLs
- Hosted checkout creation and signed payment webhooks

Structure:
- app.main: FastAPI app, routes, and service wiring.
- app.adapters: HTTP clients for the upstream providers.
- app.caching: Expiring cache, cache keys and the read-through orchestrator.
- app.normalization: Provider payload to client shape converters.
- app.payments: Checkout sessions, webhook verification and dispatch.
"""
