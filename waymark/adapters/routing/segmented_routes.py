"""Adapter for the multi-modal routes API.

Unlike the polyline API, this backend already returns itineraries split
into legs, but it routes between backend location references rather than
coordinates. Source and destination must therefore come from a location
search hit.

Units on the wire: ``travelDuration`` and segment ``time`` are minutes,
``distance`` is kilometers. They are converted to milliseconds and meters
here so that both backends produce the same SegmentedPath.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple

import httpx

from ...config import ApiConfig
from ...domain.errors import CodecError, NetworkError, ValidationError
from ...domain.models import (
    LocationRef,
    Position,
    Price,
    RoutingArgs,
    Segment,
    SegmentedPath,
    SegmentedRoutingResult,
    TransportMode,
)
from ...domain.transport import normalize_mode
from ...geometry.geo import bbox_of_positions, line_length
from ..http import json_headers, request_json
from .ingest import resolve_geometry, to_explicit

MINUTE_MILLIS = 60_000.0
KM_METERS = 1000.0


def _location_body(ref: LocationRef) -> dict[str, Any]:
    return {"id": ref.id, "sid": ref.sid, "type": ref.type}


def _price(raw: Any) -> Optional[Price]:
    if not isinstance(raw, Mapping) or raw.get("price") is None:
        return None
    return Price(amount=float(raw["price"]), currency=str(raw.get("currency") or ""))


def _geo(location: Any) -> Optional[Position]:
    if not isinstance(location, Mapping):
        return None
    geo = location.get("geo")
    if not isinstance(geo, Mapping) or geo.get("lat") is None or geo.get("lng") is None:
        return None
    return (float(geo["lng"]), float(geo["lat"]))


@dataclass
class SegmentedRoutesAdapter:
    """RoutingPort implementation for the multi-modal routes API.

    Attributes:
        client: Shared async HTTP client
        config: API configuration
    """

    client: httpx.AsyncClient
    config: ApiConfig

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def requires_location_refs(self) -> bool:
        return True

    async def route(self, args: RoutingArgs) -> SegmentedRoutingResult:
        if args.source_ref is None:
            raise ValidationError(
                "Source location is missing. Please select it from the search results.",
                field_name="source_ref",
            )
        if args.dest_ref is None:
            raise ValidationError(
                "Destination location is missing. Please select it from the search results.",
                field_name="dest_ref",
            )

        url = self.config.routes_endpoint
        payload = await request_json(
            self.client,
            "POST",
            url,
            json={
                "source": _location_body(args.source_ref),
                "destination": _location_body(args.dest_ref),
            },
            headers=json_headers(self.config.variant),
        )

        if not isinstance(payload, Mapping) or not payload.get("success"):
            message = payload.get("message") if isinstance(payload, Mapping) else None
            raise NetworkError(message or "Routes backend reported failure", url=url)

        data = payload.get("data") or {}
        routes = data.get("routes") or []
        paths = tuple(self.parse_route(raw) for raw in routes)

        self._logger.info(
            "Route received",
            extra={"source": args.source_ref.id, "dest": args.dest_ref.id, "paths": len(paths)},
        )
        return SegmentedRoutingResult(paths=paths)

    def parse_route(self, raw: Mapping[str, Any]) -> SegmentedPath:
        segments = tuple(self._parse_segment(s) for s in raw.get("segments") or [])
        return SegmentedPath(
            summary=str(raw.get("summary") or ""),
            total_time=float(raw.get("travelDuration") or 0.0) * MINUTE_MILLIS,
            total_distance=float(raw.get("distance") or 0.0) * KM_METERS,
            segments=segments,
            price=_price(raw.get("price")),
            path_id=str(raw.get("pathId") or ""),
            bbox=bbox_of_positions(p for s in segments for p in s.geometry),
        )

    def _parse_segment(self, raw: Mapping[str, Any]) -> Segment:
        mode = normalize_mode(raw.get("mode"))
        if mode is None:
            self._logger.warning(
                "Unknown segment mode, treating as cab",
                extra={"mode": raw.get("mode")},
            )
            mode = TransportMode.CAB

        geometry = self._segment_geometry(raw)
        distance = raw.get("distance")
        return Segment(
            mode=mode,
            from_ref=str(raw.get("from") or ""),
            to_ref=str(raw.get("to") or ""),
            geometry=geometry,
            distance_meters=(
                float(distance) * KM_METERS if distance is not None else line_length(geometry)
            ),
            time_millis=float(raw.get("time") or 0.0) * MINUTE_MILLIS,
            price=_price(raw.get("priceDetails")),
            summary=str(raw.get("summary") or ""),
        )

    def _segment_geometry(self, raw: Mapping[str, Any]) -> Tuple[Position, ...]:
        points = raw.get("points")
        if points is not None:
            try:
                return to_explicit(
                    resolve_geometry(points, self.config.points_encoded_multiplier)
                ).coordinates
            except CodecError as e:
                self._logger.warning(
                    "Segment geometry could not be decoded",
                    extra={"error": str(e)},
                )

        line: List[Position] = []
        for key in ("source", "destination"):
            position = _geo(raw.get(key)) or _geo(raw.get(f"{key}_sts"))
            if position is not None:
                line.append(position)
        return tuple(line) if len(line) == 2 else ()
