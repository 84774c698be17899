"""Split a single routed path into mode-tagged legs.

The routing backend returns one geometry for the whole trip plus one
snapped waypoint per query point. Each pair of consecutive waypoints
becomes a leg: the part of the geometry between the two waypoints is cut
out, a transport mode is guessed from the straight-line distance, and
distance/time are recomputed for the leg.

Both the mode thresholds and the time split are heuristics. Leg time is
the path time scaled by the leg's share of the path distance; it does
not account for different speeds per mode.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..domain.models import (
    Coordinate,
    Path,
    Position,
    Segment,
    SegmentedPath,
    TransportMode,
    coordinate_to_text,
)
from ..domain.transport import mode_label
from .geo import bbox_of_positions, haversine_km, line_length, planar_distance


@dataclass(frozen=True)
class SegmentationPolicy:
    """Distance thresholds (km) used to guess the mode of a leg.

    A leg is assigned the first mode whose threshold it strictly exceeds.
    """

    flight_km: float = 100.0
    train_km: float = 30.0
    bus_km: float = 10.0

    def classify(self, distance_km: float) -> TransportMode:
        if distance_km > self.flight_km:
            return TransportMode.FLIGHT
        if distance_km > self.train_km:
            return TransportMode.TRAIN
        if distance_km > self.bus_km:
            return TransportMode.BUS
        return TransportMode.CAB


def nearest_indices(
    start: Sequence[float],
    end: Sequence[float],
    geometry: Sequence[Sequence[float]],
) -> Tuple[int, int]:
    """Indices of the geometry points closest to ``start`` and ``end``.

    Distances are planar in the geometry's own units. The pair is returned
    in ascending order. Geometries of two points or less map to
    ``(0, len - 1)``.
    """
    if len(geometry) <= 2:
        return 0, max(len(geometry) - 1, 0)

    from_index = 0
    to_index = len(geometry) - 1
    min_from = float("inf")
    min_to = float("inf")

    for i, point in enumerate(geometry):
        from_dist = planar_distance(point, start)
        to_dist = planar_distance(point, end)
        if from_dist < min_from:
            min_from = from_dist
            from_index = i
        if to_dist < min_to:
            min_to = to_dist
            to_index = i

    if from_index > to_index:
        from_index, to_index = to_index, from_index
    return from_index, to_index


@dataclass
class SegmentationEngine:
    """Turns a decoded Path into a SegmentedPath.

    Attributes:
        policy: Mode classification thresholds
    """

    policy: SegmentationPolicy = field(default_factory=SegmentationPolicy)

    _logger: logging.Logger = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def segment(
        self,
        path: Path,
        labels: Optional[Sequence[str]] = None,
        path_id: str = "",
    ) -> SegmentedPath:
        """Split ``path`` into one segment per consecutive waypoint pair.

        Args:
            path: Decoded path with geometry and snapped waypoints.
            labels: Optional names for the waypoints (query texts); the
                coordinate text is used where missing.
            path_id: Identifier to carry over to the result.

        Returns:
            SegmentedPath with N-1 segments for N waypoints.
        """
        waypoints = path.snapped_waypoints.coordinates
        geometry = path.geometry.coordinates
        bbox = path.bbox or bbox_of_positions(geometry)

        if len(waypoints) < 2:
            self._logger.debug(
                "Path has fewer than two waypoints, no segments",
                extra={"waypoints": len(waypoints)},
            )
            return SegmentedPath(
                summary="",
                total_time=path.time,
                total_distance=path.distance,
                path_id=path_id,
                bbox=bbox,
            )

        segments: List[Segment] = []
        for i in range(len(waypoints) - 1):
            start = waypoints[i]
            end = waypoints[i + 1]
            mode = self.policy.classify(haversine_km(start, end))
            points = self._segment_points(start, end, mode, geometry)
            distance = line_length(points)
            time = path.time * (distance / path.distance) if path.distance else 0.0

            segments.append(
                Segment(
                    mode=mode,
                    from_ref=_label(labels, i, start),
                    to_ref=_label(labels, i + 1, end),
                    geometry=points,
                    distance_meters=distance,
                    time_millis=time,
                )
            )

        self._logger.debug(
            "Path segmented",
            extra={
                "segments": len(segments),
                "modes": [s.mode.value for s in segments],
            },
        )

        return SegmentedPath(
            summary=" + ".join(mode_label(s.mode) for s in segments),
            total_time=path.time,
            total_distance=path.distance,
            segments=tuple(segments),
            path_id=path_id,
            bbox=bbox,
        )

    @staticmethod
    def _segment_points(
        start: Position,
        end: Position,
        mode: TransportMode,
        geometry: Sequence[Position],
    ) -> Tuple[Position, ...]:
        if mode == TransportMode.FLIGHT or len(geometry) <= 2:
            return (start, end)
        from_index, to_index = nearest_indices(start, end, geometry)
        return (start, *geometry[from_index + 1 : to_index], end)


def _label(labels: Optional[Sequence[str]], index: int, position: Position) -> str:
    if labels is not None and index < len(labels) and labels[index]:
        return labels[index]
    return coordinate_to_text(Coordinate(lat=position[1], lng=position[0]))
