"""Routing port - Abstraction over route computation backends.

Implementations:
- adapters/routing/segmented_routes.py (SegmentedRoutesAdapter)
- adapters/routing/polyline_routes.py (PolylineRoutesAdapter)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..domain.models import RoutingArgs, SegmentedRoutingResult


class RoutingPort(Protocol):
    """Port for route computation.

    Adapters normalise the backend response (decode polylines, segment
    raw paths) before returning, so callers only see SegmentedPaths.
    """

    @property
    def requires_location_refs(self) -> bool:
        """Whether route() needs source/destination location references."""
        ...

    async def route(self, args: RoutingArgs) -> SegmentedRoutingResult:
        """Compute itineraries for the given arguments.

        Args:
            args: Query points, profile and location references.

        Returns:
            The normalised routing result.

        Raises:
            NetworkError: On transport failure or non-success response.
        """
        ...
