"""Normalise raw backend geometry at the response boundary.

Backends return geometry either as a polyline string, a GeoJSON
LineString object or a bare list of positions. It is resolved here into
EncodedGeometry or ExplicitGeometry, and then decoded once, so nothing
downstream has to inspect raw shapes.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Tuple

from ...codec import polyline
from ...domain.errors import CodecError
from ...domain.models import (
    Bbox,
    EncodedGeometry,
    ExplicitGeometry,
    Geometry,
    Path,
    Position,
)


def _positions(raw: Any) -> Tuple[Position, ...]:
    return tuple(tuple(float(v) for v in p) for p in raw)


def resolve_geometry(
    raw: Any,
    multiplier: float = polyline.DEFAULT_MULTIPLIER,
    is_3d: bool = False,
) -> Geometry:
    """Classify a raw geometry value into one of the two variants.

    Raises:
        CodecError: If the value has none of the supported shapes.
    """
    if isinstance(raw, str):
        return EncodedGeometry(value=raw, multiplier=multiplier, is_3d=is_3d)
    if isinstance(raw, Mapping) and isinstance(raw.get("coordinates"), list):
        return ExplicitGeometry(coordinates=_positions(raw["coordinates"]))
    if isinstance(raw, list):
        return ExplicitGeometry(coordinates=_positions(raw))
    raise CodecError(f"Unsupported geometry of type {type(raw).__name__}")


def to_explicit(geometry: Geometry) -> ExplicitGeometry:
    """Decode an EncodedGeometry; ExplicitGeometry is returned as is."""
    if isinstance(geometry, ExplicitGeometry):
        return geometry
    return ExplicitGeometry(
        coordinates=tuple(
            polyline.decode(geometry.value, geometry.is_3d, geometry.multiplier)
        )
    )


def _bbox(raw: Any) -> Optional[Bbox]:
    if isinstance(raw, (list, tuple)) and len(raw) == 4:
        return (float(raw[0]), float(raw[1]), float(raw[2]), float(raw[3]))
    return None


def parse_legacy_path(raw: Mapping[str, Any], is_3d: bool = False) -> Path:
    """Build a decoded Path from a polyline-API path object.

    Raises:
        CodecError: If the geometry or waypoints cannot be decoded.
    """
    multiplier = float(raw.get("points_encoded_multiplier") or polyline.DEFAULT_MULTIPLIER)
    encoded = bool(raw.get("points_encoded", isinstance(raw.get("points"), str)))

    def resolve(value: Any) -> ExplicitGeometry:
        if value is None:
            return ExplicitGeometry(coordinates=())
        if isinstance(value, str) and not encoded:
            raise CodecError("Path declares explicit points but carries a string")
        return to_explicit(resolve_geometry(value, multiplier, is_3d))

    return Path(
        distance=float(raw.get("distance", 0.0)),
        time=float(raw.get("time", 0.0)),
        geometry=resolve(raw.get("points")),
        snapped_waypoints=resolve(raw.get("snapped_waypoints")),
        bbox=_bbox(raw.get("bbox")),
        description=str(raw.get("description") or ""),
    )
