"""Centralized configuration using Pydantic Settings.

Every endpoint, delay and heuristic threshold of the client lives here
instead of being hardcoded in the components that use it.

Configuration can be overridden via environment variables:
- WAYMARK_API_ROUTES_ENDPOINT=http://localhost:50060/routeplanner/routes
- WAYMARK_API_BACKEND=polyline
- WAYMARK_GEO_DEBOUNCE_SECONDS=0.3
- WAYMARK_SEG_FLIGHT_KM=150
- etc.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiConfig(BaseSettings):
    """Routing backend configuration.

    Environment variables prefixed with WAYMARK_API_.
    """

    model_config = SettingsConfigDict(env_prefix="WAYMARK_API_")

    search_endpoint: str = "http://localhost:50091/routeplanner/location/search"
    routes_endpoint: str = "http://localhost:50060/routeplanner/routes"
    legacy_route_endpoint: str = "http://localhost:8989/route"
    overpass_endpoint: str = "https://overpass-api.de/api/interpreter"
    variant: str = "dweb"
    timeout_seconds: float = Field(default=15.0, gt=0)
    backend: Literal["segmented", "polyline"] = "segmented"
    points_encoded: bool = True
    points_encoded_multiplier: float = Field(default=1e5, gt=0)
    elevation: bool = False
    locale: str = "en"
    max_alternatives: int = Field(default=3, ge=1)


class GeocodingConfig(BaseSettings):
    """Geocoding configuration.

    Environment variables prefixed with WAYMARK_GEO_.
    """

    model_config = SettingsConfigDict(env_prefix="WAYMARK_GEO_")

    provider: Literal["search", "nominatim"] = "search"
    debounce_seconds: float = Field(default=0.2, ge=0)
    min_query_length: int = Field(default=2, ge=0)
    hit_extent_degrees: float = 0.05
    user_agent: str = "waymark-routing-client"
    nominatim_timeout_seconds: int = 10
    rate_limit_delay: float = 1.0  # Nominatim usage policy: max 1 req/s
    max_retries: int = 2
    error_wait_seconds: float = 5.0


class SegmentationConfig(BaseSettings):
    """Mode classification thresholds for route segmentation.

    These are placeholder heuristics, kept configurable on purpose.
    Environment variables prefixed with WAYMARK_SEG_.
    """

    model_config = SettingsConfigDict(env_prefix="WAYMARK_SEG_")

    flight_km: float = Field(default=100.0, ge=0)
    train_km: float = Field(default=30.0, ge=0)
    bus_km: float = Field(default=10.0, ge=0)
    access_link_steps: int = Field(default=20, ge=1)


class NavigationConfig(BaseSettings):
    """Address-bar synchronisation configuration.

    Environment variables prefixed with WAYMARK_NAV_.
    """

    model_config = SettingsConfigDict(env_prefix="WAYMARK_NAV_")

    base_url: str = "http://localhost:3000/"
    default_profile: str = "car"
    default_layer: str = "Omniscale"
    layers: tuple[str, ...] = (
        "Omniscale",
        "OpenStreetMap",
        "Mapbox",
        "TF Transport",
        "Thunderforest Outdoors",
    )


class ObservabilityConfig(BaseSettings):
    """Logging configuration.

    Environment variables prefixed with WAYMARK_LOG_.
    """

    model_config = SettingsConfigDict(env_prefix="WAYMARK_LOG_")

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = False  # Set True for JSON logging


class AppConfig(BaseSettings):
    """Main application configuration aggregating all sub-configs.

        config = get_config()
        print(config.api.routes_endpoint)
        print(config.segmentation.flight_km)

    Environment variables prefixed with WAYMARK_.
    """

    model_config = SettingsConfigDict(env_prefix="WAYMARK_")

    api: ApiConfig = Field(default_factory=ApiConfig)
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    navigation: NavigationConfig = Field(default_factory=NavigationConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Get the application configuration.

    Configuration is loaded once and cached. To reload configuration
    (e.g., in tests), use reset_config() first.
    """
    return AppConfig()


def reset_config() -> None:
    """Reset the configuration cache."""
    get_config.cache_clear()
