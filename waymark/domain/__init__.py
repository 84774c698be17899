"""Domain layer - Core models, actions and errors.

This module contains immutable domain models, the action vocabulary
and typed errors used throughout the client. No external dependencies.
"""

from .errors import (
    CodecError,
    ConfigurationError,
    NetworkError,
    ValidationError,
    WaymarkError,
)
from .models import (
    EMPTY_PATH,
    Coordinate,
    CurrentRequest,
    EncodedGeometry,
    ExplicitGeometry,
    GeocodingHit,
    LocationRef,
    Path,
    PoiHit,
    Price,
    QueryPoint,
    QueryPointType,
    RequestState,
    RouteStoreState,
    RoutingArgs,
    Segment,
    SegmentedPath,
    SegmentedRoutingResult,
    SubRequest,
    TransportMode,
    coordinate_to_text,
)

__all__ = [
    # Models
    "Coordinate",
    "LocationRef",
    "QueryPoint",
    "QueryPointType",
    "RoutingArgs",
    "EncodedGeometry",
    "ExplicitGeometry",
    "Path",
    "TransportMode",
    "Price",
    "Segment",
    "SegmentedPath",
    "SegmentedRoutingResult",
    "EMPTY_PATH",
    "RequestState",
    "SubRequest",
    "CurrentRequest",
    "RouteStoreState",
    "GeocodingHit",
    "PoiHit",
    "coordinate_to_text",
    # Errors
    "WaymarkError",
    "NetworkError",
    "CodecError",
    "ValidationError",
    "ConfigurationError",
]
