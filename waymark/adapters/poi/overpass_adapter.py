"""Overpass POI search adapter.

Translates a PoiQuery into Overpass QL and maps the returned elements to
PoiHits. Large areas are shrunk around their centre first: Overpass gets
slow for whole cities, at the cost of possibly missing rare POIs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

import httpx

from ...config import ApiConfig
from ...domain.models import Bbox, Coordinate, PoiHit
from ...services.address_parse import PoiQuery
from ..http import request_json

MAX_SPAN_DEGREES = 0.3
MAX_RESULTS = 100


def clamp_bbox(bbox: Bbox) -> Tuple[float, float, float, float]:
    """Return (minLat, minLon, maxLat, maxLon) limited to 0.3 degrees per axis."""
    min_lon, min_lat, max_lon, max_lat = bbox
    if max_lat - min_lat > MAX_SPAN_DEGREES:
        center = (max_lat + min_lat) / 2
        min_lat, max_lat = center - MAX_SPAN_DEGREES / 2, center + MAX_SPAN_DEGREES / 2
    if max_lon - min_lon > MAX_SPAN_DEGREES:
        center = (max_lon + min_lon) / 2
        min_lon, max_lon = center - MAX_SPAN_DEGREES / 2, center + MAX_SPAN_DEGREES / 2
    return (min_lat, min_lon, max_lat, max_lon)


def build_overpass_query(query: PoiQuery, bbox: Bbox, timeout: int = 15) -> str:
    """Render a PoiQuery as Overpass QL searching nodes, ways and relations."""
    statements = ""
    for and_query in query.queries:
        statements += "nwr"
        for p in and_query.phrases:
            if p.sign == "=" and p.value == "*":
                statements += f'["{p.key}"]'
            elif p.ignore_case:
                statements += f'["{p.key}"{p.sign}"{p.value}", i]'
            else:
                statements += f'["{p.key}"{p.sign}"{p.value}"]'
        statements += ";\n"

    min_lat, min_lon, max_lat, max_lon = clamp_bbox(bbox)
    return (
        f"[out:json][timeout:{timeout}][bbox:{min_lat}, {min_lon}, {max_lat}, {max_lon}];\n"
        f"({statements});\nout center {MAX_RESULTS};"
    )


def _to_hit(element: Mapping[str, Any]) -> Optional[PoiHit]:
    center = element.get("center") or element
    lat, lon = center.get("lat"), center.get("lon")
    tags = element.get("tags")
    if lat is None or lon is None or not tags:
        return None
    return PoiHit(
        id=int(element.get("id", 0)),
        point=Coordinate(lat=float(lat), lng=float(lon)),
        tags=dict(tags),
    )


@dataclass
class OverpassPoiAdapter:
    """PoiSearchPort implementation backed by the Overpass API.

    Attributes:
        client: Shared async HTTP client
        config: API configuration (overpass endpoint and timeout)
    """

    client: httpx.AsyncClient
    config: ApiConfig

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    async def search(self, query: PoiQuery, bbox: Bbox) -> List[PoiHit]:
        if not query.queries:
            return []

        ql = build_overpass_query(query, bbox, timeout=int(self.config.timeout_seconds))
        payload = await request_json(
            self.client,
            "POST",
            self.config.overpass_endpoint,
            data={"data": ql},
        )

        elements = payload.get("elements") if isinstance(payload, Mapping) else None
        hits = [h for h in (_to_hit(e) for e in elements or []) if h is not None]
        self._logger.debug("POI search", extra={"hits": len(hits)})
        return hits
