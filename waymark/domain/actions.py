"""Action vocabulary shared by user input, the gateway and URL sync.

Every action is a frozen dataclass and ``Action`` is the closed union of
all of them. Reducers branch on the concrete class and return the state
unchanged for actions they do not handle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple, Union

from .models import (
    Bbox,
    Coordinate,
    QueryPoint,
    RoutingArgs,
    SegmentedPath,
    SegmentedRoutingResult,
)


@dataclass(frozen=True, slots=True)
class AddPoint:
    """Insert an empty (or pre-filled) query point at ``at_index``."""

    at_index: int
    coordinate: Optional[Coordinate] = None
    query_text: str = ""


@dataclass(frozen=True, slots=True)
class RemovePoint:
    point_id: int


@dataclass(frozen=True, slots=True)
class SetPoint:
    """Replace a query point (matched by id) with a resolved one."""

    point: QueryPoint


@dataclass(frozen=True, slots=True)
class InvalidatePoint:
    point_id: int


@dataclass(frozen=True, slots=True)
class MovePoint:
    point_id: int
    new_index: int


@dataclass(frozen=True, slots=True)
class SetQueryPoints:
    points: Tuple[QueryPoint, ...]


@dataclass(frozen=True, slots=True)
class ClearPoints:
    pass


@dataclass(frozen=True, slots=True)
class SetVehicleProfile:
    profile: str


@dataclass(frozen=True, slots=True)
class SetCustomModel:
    custom_model: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True, slots=True)
class RouteRequestSuccess:
    """A route response that won the sequence check."""

    request: RoutingArgs
    zoom: bool
    result: SegmentedRoutingResult
    sequence: int = -1


@dataclass(frozen=True, slots=True)
class RouteRequestFailed:
    request: RoutingArgs
    message: str
    sequence: int = -1


@dataclass(frozen=True, slots=True)
class ClearRoute:
    pass


@dataclass(frozen=True, slots=True)
class SetSelectedPath:
    path: SegmentedPath


@dataclass(frozen=True, slots=True)
class UpdateSettings:
    """Merge the given fields into the settings state."""

    updated: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SelectMapLayer:
    layer: str


@dataclass(frozen=True, slots=True)
class SetBBox:
    bbox: Bbox


@dataclass(frozen=True, slots=True)
class DismissLastError:
    pass


Action = Union[
    AddPoint,
    RemovePoint,
    SetPoint,
    InvalidatePoint,
    MovePoint,
    SetQueryPoints,
    ClearPoints,
    SetVehicleProfile,
    SetCustomModel,
    RouteRequestSuccess,
    RouteRequestFailed,
    ClearRoute,
    SetSelectedPath,
    UpdateSettings,
    SelectMapLayer,
    SetBBox,
    DismissLastError,
]
