"""
Shared configuration management for the Musij backend.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    environment: str = Field(default="development")
    log_level: str = Field(default="info")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    frontend_url: str = Field(default="http://127.0.0.1:5500")
    api_prefix: str = Field(default="/api")

    # Upstream transport
    upstream_timeout: float = Field(default=10.0)
    cache_sweep_interval: float = Field(default=600.0)
    token_safety_margin: int = Field(default=100)

    # Payment provider
    stripe_secret_key: Optional[str] = Field(default=None)
    stripe_publishable_key: Optional[str] = Field(default=None)
    stripe_webhook_secret: Optional[str] = Field(default=None)
    checkout_currency: str = Field(default="idr")

    # Music catalog provider (client-credentials)
    spotify_client_id: Optional[str] = Field(default=None)
    spotify_client_secret: Optional[str] = Field(default=None)
    spotify_token_url: str = Field(default="https://accounts.spotify.com/api/token")
    spotify_api_url: str = Field(default="https://api.spotify.com/v1")
    spotify_market: str = Field(default="ID")

    # Lyrics metadata provider
    genius_access_token: Optional[str] = Field(default=None)
    genius_api_url: str = Field(default="https://api.genius.com")

    # Scrobble provider
    lastfm_api_key: Optional[str] = Field(default=None)
    lastfm_api_url: str = Field(default="http://ws.audioscrobbler.com/2.0/")

    # Event listings provider
    bandsintown_app_id: str = Field(default="musij_platform")
    bandsintown_api_url: str = Field(default="https://rest.bandsintown.com")


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str = "aggregator"

    def __init__(self, service_name: str = "aggregator", **kwargs):
        super().__init__(service_name=service_name, **kwargs)


def get_config(service_name: str = "aggregator", **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, **overrides)
