"""Routing adapters - implementations of RoutingPort."""

from .polyline_routes import PolylineRoutesAdapter
from .segmented_routes import SegmentedRoutesAdapter

__all__ = ["PolylineRoutesAdapter", "SegmentedRoutesAdapter"]
