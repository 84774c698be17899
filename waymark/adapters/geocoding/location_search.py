"""Location search adapter.

Queries the routes backend's own location index. Its hits carry the
LocationRef the segmented routes API needs for source and destination.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

import httpx

from ...config import ApiConfig, GeocodingConfig
from ...domain.models import Coordinate, GeocodingHit, LocationRef
from ...geometry.geo import bbox_around
from ..http import json_headers, request_json


@dataclass
class LocationSearchAdapter:
    """GeocoderPort implementation backed by the location search API.

    Attributes:
        client: Shared async HTTP client
        api: API configuration (endpoint and variant header)
        config: Geocoding configuration (hit extent)
    """

    client: httpx.AsyncClient
    api: ApiConfig
    config: GeocodingConfig

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def geocode(
        self, query: str, bias: Optional[Coordinate] = None
    ) -> List[GeocodingHit]:
        if not query or not query.strip():
            return []

        payload = await request_json(
            self.client,
            "GET",
            self.api.search_endpoint,
            params={"q": query.strip()},
            headers=json_headers(self.api.variant),
        )

        if not isinstance(payload, Mapping) or not payload.get("success"):
            self._logger.debug("Location search returned no success", extra={"query": query})
            return []

        hits = [self._to_hit(raw) for raw in payload.get("data") or []]
        self._logger.debug("Location search", extra={"query": query, "hits": len(hits)})
        return hits

    def _to_hit(self, raw: Mapping[str, Any]) -> GeocodingHit:
        geo = raw.get("geo") or {}
        point = Coordinate(lat=float(geo.get("lat") or 0.0), lng=float(geo.get("lng") or 0.0))
        name = str(raw.get("name") or "")
        ref = LocationRef(
            id=str(raw.get("id") or ""),
            sid=int(raw.get("sid") or 0),
            type=int(raw.get("type") or 1),
            name=name,
        )
        return GeocodingHit(
            id=ref.id,
            point=point,
            extent=bbox_around(point, self.config.hit_extent_degrees),
            name=name,
            country=str(raw.get("cc") or ""),
            city=name,
            location_ref=ref,
        )
