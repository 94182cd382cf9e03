"""
Shared utilities for the Musij backend.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and the response envelope
- base_service: FastAPI app wiring (middleware, error handlers, health)

Do not import from service packages into shared/.
"""
