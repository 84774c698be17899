"""Immutable domain models for the waymark routing client.

All models are frozen dataclasses with slots. Stores never mutate them:
a reducer always builds a new value and swaps the state reference.
These models have no external dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple, Union

# minLon, minLat, maxLon, maxLat
Bbox = Tuple[float, float, float, float]

# (lon, lat) or (lon, lat, elevation)
Position = Tuple[float, ...]


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A WGS84 coordinate as entered or displayed (latitude first)."""

    lat: float
    lng: float


def coordinate_to_text(coordinate: Coordinate) -> str:
    """Format a coordinate as ``lat,lng`` rounded to six decimals."""
    return f"{_trim(coordinate.lat)},{_trim(coordinate.lng)}"


def _trim(value: float) -> str:
    text = f"{round(value, 6):.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


class QueryPointType(str, Enum):
    """Role of a query point inside the route request."""

    FROM = "from"
    TO = "to"
    VIA = "via"


@dataclass(frozen=True, slots=True)
class LocationRef:
    """Reference to a location known by the routes backend.

    Attributes:
        id: Backend location identifier
        sid: Secondary (numeric) identifier
        type: Location type code (1 = city)
        name: Display name
    """

    id: str
    sid: int
    type: int = 1
    name: str = ""


@dataclass(frozen=True, slots=True)
class QueryPoint:
    """One slot of the routing query.

    Attributes:
        id: Stable identifier of the slot
        coordinate: Resolved coordinate (meaningless until initialized)
        query_text: Text shown in the input field
        is_initialized: Whether the coordinate has been resolved
        type: FROM, TO or VIA
        location_ref: Backend location reference, if selected from search
    """

    id: int
    coordinate: Coordinate = field(default_factory=lambda: Coordinate(0.0, 0.0))
    query_text: str = ""
    is_initialized: bool = False
    type: QueryPointType = QueryPointType.VIA
    location_ref: Optional[LocationRef] = None


@dataclass(frozen=True, slots=True)
class RoutingArgs:
    """Immutable arguments of a single route request.

    Attributes:
        points: (lng, lat) pairs, one per query point
        profile: Routing profile name
        max_alternatives: Number of alternative routes requested
        custom_model: Optional custom model passed to the backend
        source_ref: Location reference of the FROM point
        dest_ref: Location reference of the TO point
    """

    points: Tuple[Tuple[float, float], ...]
    profile: str
    max_alternatives: int = 3
    custom_model: Optional[Mapping[str, Any]] = None
    source_ref: Optional[LocationRef] = None
    dest_ref: Optional[LocationRef] = None


@dataclass(frozen=True, slots=True)
class EncodedGeometry:
    """Geometry still in polyline-encoded form."""

    value: str
    multiplier: float = 1e5
    is_3d: bool = False


@dataclass(frozen=True, slots=True)
class ExplicitGeometry:
    """Geometry as an explicit coordinate sequence of (lon, lat[, ele])."""

    coordinates: Tuple[Position, ...]


Geometry = Union[EncodedGeometry, ExplicitGeometry]


@dataclass(frozen=True, slots=True)
class Path:
    """A decoded path from the polyline-based routing API.

    Attributes:
        distance: Total distance in meters
        time: Total time in milliseconds
        geometry: Full route geometry, resolved to explicit coordinates
        snapped_waypoints: One waypoint per query point, snapped to the network
        bbox: Bounding box reported by the backend
        description: Free text description
    """

    distance: float
    time: float
    geometry: ExplicitGeometry
    snapped_waypoints: ExplicitGeometry
    bbox: Optional[Bbox] = None
    description: str = ""


class TransportMode(str, Enum):
    """Mode of one itinerary leg."""

    FLIGHT = "flight"
    TRAIN = "train"
    BUS = "bus"
    CAB = "cab"


@dataclass(frozen=True, slots=True)
class Price:
    amount: float
    currency: str = ""


@dataclass(frozen=True, slots=True)
class Segment:
    """One mode-homogeneous leg of an itinerary.

    Attributes:
        mode: Transport mode of the leg
        from_ref: Name (or coordinate text) of the leg origin
        to_ref: Name (or coordinate text) of the leg destination
        geometry: Coordinates of the leg as (lon, lat[, ele])
        distance_meters: Leg length
        time_millis: Leg duration
        price: Optional fare of the leg
        summary: Optional backend summary
    """

    mode: TransportMode
    from_ref: str
    to_ref: str
    geometry: Tuple[Position, ...]
    distance_meters: float
    time_millis: float
    price: Optional[Price] = None
    summary: str = ""


@dataclass(frozen=True, slots=True)
class SegmentedPath:
    """A complete multi-modal itinerary.

    Attributes:
        summary: Human-readable summary (e.g. "Flight, Cab")
        total_time: Total duration in milliseconds
        total_distance: Total length in meters
        segments: Legs in travel order
        price: Optional total fare
        path_id: Backend identifier of the itinerary
        bbox: Bounding box of all segment coordinates
    """

    summary: str
    total_time: float
    total_distance: float
    segments: Tuple[Segment, ...] = field(default_factory=tuple)
    price: Optional[Price] = None
    path_id: str = ""
    bbox: Optional[Bbox] = None

    @property
    def is_empty(self) -> bool:
        return len(self.segments) == 0


EMPTY_PATH = SegmentedPath(summary="", total_time=0.0, total_distance=0.0)


@dataclass(frozen=True, slots=True)
class SegmentedRoutingResult:
    paths: Tuple[SegmentedPath, ...] = field(default_factory=tuple)


class RequestState(str, Enum):
    SENT = "sent"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SubRequest:
    """A route request that was handed to the gateway.

    Attributes:
        args: Arguments of the request
        sequence: Sequence number assigned by the gateway at issuance
        state: Current lifecycle state
    """

    args: RoutingArgs
    sequence: int
    state: RequestState = RequestState.SENT


@dataclass(frozen=True, slots=True)
class CurrentRequest:
    sub_requests: Tuple[SubRequest, ...] = field(default_factory=tuple)

    @property
    def is_pending(self) -> bool:
        return any(r.state == RequestState.SENT for r in self.sub_requests)


@dataclass(frozen=True, slots=True)
class RouteStoreState:
    all_paths: Tuple[SegmentedPath, ...] = field(default_factory=tuple)
    selected_path: SegmentedPath = EMPTY_PATH


@dataclass(frozen=True, slots=True)
class GeocodingHit:
    """A forward geocoding result.

    Attributes:
        id: Backend identifier, used to filter duplicate hits
        point: Coordinate of the hit
        extent: Bounding box around the hit
        name: Display name
        country: Country code or name
        city: City name
        location_ref: Backend location reference for routing
    """

    id: str
    point: Coordinate
    extent: Bbox
    name: str
    country: str = ""
    city: str = ""
    location_ref: Optional[LocationRef] = None

    def to_text(self) -> str:
        if not self.city or self.city in self.name:
            return self.name
        return f"{self.name}, {self.city}"


@dataclass(frozen=True, slots=True)
class PoiHit:
    """A point of interest found by a reverse (POI) search."""

    id: int
    point: Coordinate
    tags: Mapping[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.tags.get("name", "")
