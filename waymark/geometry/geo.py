"""Small geodesy and bounding-box helpers.

Positions are (lon, lat[, elevation]) tuples as used by GeoJSON.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

from ..domain.models import Bbox, Coordinate, SegmentedPath

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = 6_371_000.0


def haversine(
    a: Sequence[float], b: Sequence[float], radius: float = EARTH_RADIUS_M
) -> float:
    """Great-circle distance between two (lon, lat) positions.

    The result is in the unit of ``radius`` (meters by default).
    """
    lat1 = math.radians(a[1])
    lat2 = math.radians(b[1])
    d_lat = lat2 - lat1
    d_lon = math.radians(b[0] - a[0])

    x = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    return radius * 2 * math.atan2(math.sqrt(x), math.sqrt(1 - x))


def haversine_km(a: Sequence[float], b: Sequence[float]) -> float:
    return haversine(a, b, radius=EARTH_RADIUS_KM)


def planar_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance in the positions' own units (degrees)."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def line_length(positions: Sequence[Sequence[float]]) -> float:
    """Haversine length of a line in meters."""
    return sum(
        haversine(positions[i], positions[i + 1]) for i in range(len(positions) - 1)
    )


def bbox_of_positions(positions: Iterable[Sequence[float]]) -> Optional[Bbox]:
    """Bounding box of (lon, lat) positions, or None when empty."""
    min_lon, min_lat, max_lon, max_lat = 180.0, 90.0, -180.0, -90.0
    seen = False
    for p in positions:
        seen = True
        min_lon = min(min_lon, p[0])
        min_lat = min(min_lat, p[1])
        max_lon = max(max_lon, p[0])
        max_lat = max(max_lat, p[1])
    if not seen:
        return None
    return (min_lon, min_lat, max_lon, max_lat)


def bbox_of_points(points: Sequence[Coordinate]) -> Optional[Bbox]:
    """Bounding box of coordinates.

    A single coordinate is padded by 0.001 degrees. Returns None when the
    resulting box is degenerate (e.g. no points at all).
    """
    bbox = bbox_of_positions((c.lng, c.lat) for c in points)
    if bbox is None:
        return None
    min_lon, min_lat, max_lon, max_lat = bbox
    if len(points) == 1:
        min_lon -= 0.001
        min_lat -= 0.001
        max_lon += 0.001
        max_lat += 0.001
    if min_lon < max_lon and min_lat < max_lat:
        return (min_lon, min_lat, max_lon, max_lat)
    return None


def bbox_around(coordinate: Coordinate, offset: float = 0.005) -> Bbox:
    return (
        coordinate.lng - offset,
        coordinate.lat - offset,
        coordinate.lng + offset,
        coordinate.lat + offset,
    )


def path_bbox(path: SegmentedPath) -> Optional[Bbox]:
    """Bounding box over every segment coordinate of a path."""
    return bbox_of_positions(p for segment in path.segments for p in segment.geometry)
