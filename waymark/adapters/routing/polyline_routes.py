"""Adapter for the polyline-based route API.

The backend answers with one raw path per alternative: the full geometry
(usually polyline encoded), the snapped waypoints, total distance and
time. Each path is decoded and split into legs by the SegmentationEngine.
A path whose polyline cannot be decoded is dropped from the result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

import httpx

from ...config import ApiConfig
from ...domain.errors import CodecError, NetworkError
from ...domain.models import RoutingArgs, SegmentedPath, SegmentedRoutingResult
from ...geometry.segmentation import SegmentationEngine
from ..http import json_headers, request_json
from .ingest import parse_legacy_path


@dataclass
class PolylineRoutesAdapter:
    """RoutingPort implementation for the polyline route API.

    Attributes:
        client: Shared async HTTP client
        config: API configuration
        engine: Segmentation engine applied to every decoded path
    """

    client: httpx.AsyncClient
    config: ApiConfig
    engine: SegmentationEngine = field(default_factory=SegmentationEngine)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    @property
    def requires_location_refs(self) -> bool:
        return False

    def build_request(self, args: RoutingArgs) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "points": [list(p) for p in args.points],
            "profile": args.profile,
            "locale": self.config.locale,
            "points_encoded": self.config.points_encoded,
            "points_encoded_multiplier": self.config.points_encoded_multiplier,
            "instructions": False,
            "elevation": self.config.elevation,
            "snap_preventions": ["ferry"],
        }
        if args.max_alternatives > 1 and len(args.points) == 2:
            body["algorithm"] = "alternative_route"
            body["alternative_route.max_paths"] = args.max_alternatives
        if args.custom_model:
            body["custom_model"] = dict(args.custom_model)
            body["ch.disable"] = True
        return body

    async def route(self, args: RoutingArgs) -> SegmentedRoutingResult:
        url = self.config.legacy_route_endpoint
        payload = await request_json(
            self.client,
            "POST",
            url,
            json=self.build_request(args),
            headers=json_headers(),
        )

        raw_paths = payload.get("paths") if isinstance(payload, dict) else None
        if raw_paths is None:
            message = payload.get("message") if isinstance(payload, dict) else None
            raise NetworkError(message or "Route response contains no paths", url=url)

        paths: List[SegmentedPath] = []
        for index, raw in enumerate(raw_paths):
            try:
                path = parse_legacy_path(raw, is_3d=self.config.elevation)
            except CodecError as e:
                self._logger.warning(
                    "Dropping path with undecodable geometry",
                    extra={"path_index": index, "error": str(e)},
                )
                continue
            paths.append(self.engine.segment(path, path_id=str(index)))

        self._logger.info(
            "Route received",
            extra={"paths": len(paths), "dropped": len(raw_paths) - len(paths)},
        )
        return SegmentedRoutingResult(paths=tuple(paths))
