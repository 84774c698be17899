"""Selected map layer and the viewport requested by the client."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..domain.actions import Action, RouteRequestSuccess, SelectMapLayer, SetBBox
from ..domain.models import Bbox
from ..geometry.geo import bbox_of_positions, path_bbox
from .store import Store


@dataclass(frozen=True, slots=True)
class MapOptionsState:
    selected_layer: str
    layers: Tuple[str, ...]
    bbox: Optional[Bbox] = None


class MapOptionsStore(Store[MapOptionsState]):
    def __init__(self, layers: Sequence[str], default_layer: str) -> None:
        super().__init__(
            MapOptionsState(selected_layer=default_layer, layers=tuple(layers))
        )

    def reduce(self, state: MapOptionsState, action: Action) -> MapOptionsState:
        if isinstance(action, SelectMapLayer):
            if action.layer == state.selected_layer:
                return state
            if action.layer not in state.layers:
                self._logger.warning(
                    "Unknown map layer, keeping current selection",
                    extra={"layer": action.layer},
                )
                return state
            return dataclasses.replace(state, selected_layer=action.layer)

        if isinstance(action, SetBBox):
            if action.bbox == state.bbox:
                return state
            return dataclasses.replace(state, bbox=action.bbox)

        if isinstance(action, RouteRequestSuccess):
            if not action.zoom or not action.result.paths:
                return state
            bbox = _route_bbox(action)
            return state if bbox is None else dataclasses.replace(state, bbox=bbox)

        return state


def _route_bbox(action: RouteRequestSuccess) -> Optional[Bbox]:
    """Bbox of the first path widened to include the requested points."""
    first = path_bbox(action.result.paths[0]) or action.result.paths[0].bbox
    corners = list(action.request.points)
    if first is not None:
        corners += [(first[0], first[1]), (first[2], first[3])]
    bbox = bbox_of_positions(corners)
    if bbox is None:
        return None
    min_lon, min_lat, max_lon, max_lat = bbox
    if max_lon - min_lon < 0.001:
        min_lon -= 0.0005
        max_lon += 0.0005
    if max_lat - min_lat < 0.001:
        min_lat -= 0.0005
        max_lat += 0.0005
    return (min_lon, min_lat, max_lon, max_lat)
