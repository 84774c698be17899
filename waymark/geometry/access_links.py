"""Synthetic access links between query points and the routed network.

A query point typed by the user rarely sits on the network; the route
starts at the nearest snapped waypoint instead. The gap is drawn as a
quadratic Bezier arc so it is visibly distinct from the route itself.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from ..domain.models import Position, QueryPoint, SegmentedPath

DEFAULT_STEPS = 20


def bezier_access_link(
    start: Sequence[float],
    end: Sequence[float],
    steps: int = DEFAULT_STEPS,
) -> List[Tuple[float, float]]:
    """Sample a quadratic Bezier arc from ``start`` to ``end``.

    The control point is the midpoint shifted perpendicular to the chord
    by ``min(0.5, 100 / d) * d`` where ``d`` is the chord length. The arc
    is sampled at ``steps + 1`` evenly spaced parameters and the last
    sample is the literal ``end``.
    """
    x0, y0 = start[0], start[1]
    x1, y1 = end[0], end[1]
    dx = x1 - x0
    dy = y1 - y0
    distance = math.hypot(dx, dy)

    mid_x = (x0 + x1) / 2
    mid_y = (y0 + y1) / 2
    if distance > 0:
        height = min(0.5, 100 / distance) * distance
        # offset along the chord normal, not just -y, so the bend is the same for any link direction
        ctrl_x = mid_x + height * dy / distance
        ctrl_y = mid_y - height * dx / distance
    else:
        ctrl_x, ctrl_y = mid_x, mid_y

    points: List[Tuple[float, float]] = []
    for i in range(steps + 1):
        t = i / steps
        s = 1 - t
        x = s * s * x0 + 2 * s * t * ctrl_x + t * t * x1
        y = s * s * y0 + 2 * s * t * ctrl_y + t * t * y1
        points.append((x, y))

    points[-1] = (x1, y1)
    return points


def path_waypoints(path: SegmentedPath) -> List[Position]:
    """The first position of the first segment plus the last of every segment."""
    if not path.segments or not all(s.geometry for s in path.segments):
        return []
    waypoints: List[Position] = [path.segments[0].geometry[0]]
    waypoints.extend(segment.geometry[-1] for segment in path.segments)
    return waypoints


def access_links(
    path: SegmentedPath,
    query_points: Sequence[QueryPoint],
    steps: int = DEFAULT_STEPS,
) -> List[List[Tuple[float, float]]]:
    """One access link per initialized query point to its matching waypoint."""
    waypoints = path_waypoints(path)
    links: List[List[Tuple[float, float]]] = []
    for point, waypoint in zip(query_points, waypoints):
        if not point.is_initialized:
            continue
        start = (point.coordinate.lng, point.coordinate.lat)
        links.append(bezier_access_link(start, waypoint, steps))
    return links
