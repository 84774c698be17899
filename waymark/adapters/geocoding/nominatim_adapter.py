"""Nominatim geocoder adapter.

Alternative GeocoderPort for deployments that route on coordinates (the
polyline backend) and therefore do not need backend location references.
geopy is synchronous, so lookups run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from geopy.exc import GeocoderServiceError, GeocoderTimedOut, GeocoderUnavailable
from geopy.extra.rate_limiter import RateLimiter
from geopy.geocoders import Nominatim

from ...config import GeocodingConfig
from ...domain.errors import NetworkError
from ...domain.models import Bbox, Coordinate, GeocodingHit
from ...geometry.geo import bbox_around


def _extent(raw: Any, point: Coordinate, fallback: float) -> Bbox:
    # nominatim boundingbox is [minLat, maxLat, minLon, maxLon] as strings
    if isinstance(raw, list) and len(raw) == 4:
        min_lat, max_lat, min_lon, max_lon = (float(v) for v in raw)
        return (min_lon, min_lat, max_lon, max_lat)
    return bbox_around(point, fallback)


@dataclass
class NominatimGeocoderAdapter:
    """Nominatim geocoder adapter.

    Attributes:
        config: Geocoding configuration
        limit: Maximum number of hits per query
    """

    config: GeocodingConfig
    limit: int = 5

    _geocode_fn: Optional[Callable[..., Any]] = field(default=None, repr=False)
    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _get_geocoder(self) -> Callable[..., Any]:
        if self._geocode_fn is not None:
            return self._geocode_fn

        self._logger.debug(
            "Initializing Nominatim geocoder",
            extra={
                "user_agent": self.config.user_agent,
                "timeout": self.config.nominatim_timeout_seconds,
            },
        )
        geolocator = Nominatim(
            user_agent=self.config.user_agent,
            timeout=self.config.nominatim_timeout_seconds,
        )
        # raise once retries are exhausted instead of returning None
        self._geocode_fn = RateLimiter(
            geolocator.geocode,
            min_delay_seconds=self.config.rate_limit_delay,
            max_retries=self.config.max_retries,
            error_wait_seconds=self.config.error_wait_seconds,
            swallow_exceptions=False,
        )
        return self._geocode_fn

    async def geocode(
        self, query: str, bias: Optional[Coordinate] = None
    ) -> List[GeocodingHit]:
        if not query or not query.strip():
            return []

        geocode_fn = self._get_geocoder()
        kwargs: dict[str, Any] = {
            "exactly_one": False,
            "limit": self.limit,
            "addressdetails": True,
        }
        if bias is not None:
            kwargs["viewbox"] = [
                (bias.lat - 1.0, bias.lng - 1.0),
                (bias.lat + 1.0, bias.lng + 1.0),
            ]

        try:
            locations = await asyncio.to_thread(geocode_fn, query.strip(), **kwargs)
        except (GeocoderTimedOut, GeocoderUnavailable, GeocoderServiceError) as e:
            self._logger.warning(
                "Geocode service error",
                extra={"query": query, "error": str(e)},
            )
            raise NetworkError("Geocoding service unavailable", cause=e) from e

        hits = [self._to_hit(location) for location in locations or []]
        self._logger.debug("Geocode success", extra={"query": query, "hits": len(hits)})
        return hits

    def _to_hit(self, location: Any) -> GeocodingHit:
        raw = location.raw
        address = raw.get("address", {})
        point = Coordinate(lat=float(location.latitude), lng=float(location.longitude))
        city = (
            address.get("city")
            or address.get("municipality")
            or address.get("town")
            or address.get("village")
            or ""
        )
        return GeocodingHit(
            id=f"{raw.get('osm_type', '')}{raw.get('osm_id', raw.get('place_id', ''))}",
            point=point,
            extent=_extent(raw.get("boundingbox"), point, self.config.hit_extent_degrees),
            name=str(raw.get("name") or location.address.split(",")[0]),
            country=str(address.get("country_code") or address.get("country") or ""),
            city=str(city),
        )
