"""RoutingGateway - issues backend calls and turns results into actions.

Route responses can arrive in any order. Every request gets a sequence
number when it is issued, and a response is only applied if no response
of a later-issued request has been seen yet ("latest issued wins"). The
in-flight HTTP call of a superseded request is not aborted; its result is
simply dropped on arrival.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Set

from ..domain.actions import RouteRequestFailed, RouteRequestSuccess
from ..domain.errors import ValidationError, WaymarkError
from ..domain.models import (
    Bbox,
    Coordinate,
    GeocodingHit,
    PoiHit,
    RoutingArgs,
    SegmentedRoutingResult,
)
from ..ports.geocoding import GeocoderPort
from ..ports.poi import PoiSearchPort
from ..ports.routing import RoutingPort
from ..stores.dispatcher import Dispatcher
from .address_parse import PoiQuery


class RoutingGateway:
    """Single entry point for routing, geocoding and POI calls.

    Args:
        dispatcher: Bus receiving RouteRequestSuccess/RouteRequestFailed
        routing: Route computation backend
        geocoder: Forward geocoding backend
        poi_search: Optional POI backend; without it reverse_geocode
            always returns no hits
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        routing: RoutingPort,
        geocoder: GeocoderPort,
        poi_search: Optional[PoiSearchPort] = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._routing = routing
        self._geocoder = geocoder
        self._poi_search = poi_search
        self._route_counter = 0
        self._last_applied_sequence = -1
        self._tasks: Set[asyncio.Task[None]] = set()
        self._logger = logging.getLogger(__name__)

    @property
    def last_applied_sequence(self) -> int:
        return self._last_applied_sequence

    async def route(self, args: RoutingArgs) -> SegmentedRoutingResult:
        """Compute routes without touching application state.

        Raises:
            ValidationError: If the backend routes between location
                references and the source or destination has none.
            NetworkError: On transport failure or non-success response.
        """
        if self._routing.requires_location_refs:
            if args.source_ref is None or args.dest_ref is None:
                raise ValidationError(
                    "Source or destination location data is missing. "
                    "Please select locations from the search results.",
                    field_name="source_ref" if args.source_ref is None else "dest_ref",
                )
        return await self._routing.route(args)

    def route_with_dispatch(self, args: RoutingArgs, zoom: bool) -> int:
        """Schedule a route request and return its sequence number.

        Must be called from inside a running event loop. The outcome is
        dispatched later as RouteRequestSuccess or RouteRequestFailed,
        unless a later-issued request has already settled.
        """
        sequence = self._route_counter
        self._route_counter += 1

        task = asyncio.get_running_loop().create_task(
            self._settle(args, zoom, sequence), name=f"route-{sequence}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return sequence

    async def _settle(self, args: RoutingArgs, zoom: bool, sequence: int) -> None:
        try:
            result = await self.route(args)
            action = RouteRequestSuccess(args, zoom, result, sequence=sequence)
        except WaymarkError as e:
            action = RouteRequestFailed(args, e.message, sequence=sequence)
        except Exception as e:
            self._logger.exception("Unexpected error in route request")
            action = RouteRequestFailed(args, str(e) or type(e).__name__, sequence=sequence)

        if sequence > self._last_applied_sequence:
            if isinstance(action, RouteRequestFailed):
                self._logger.warning(
                    "Route request failed",
                    extra={"sequence": sequence, "error": action.message},
                )
            self._last_applied_sequence = sequence
            self._dispatcher.dispatch(action)
        else:
            self._logger.info(
                "Race suppressed: ignoring response of earlier started route",
                extra={
                    "sequence": sequence,
                    "last_applied": self._last_applied_sequence,
                    "outcome": type(action).__name__,
                },
            )

    async def wait_for_pending(self) -> None:
        """Wait until every scheduled route request has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def geocode(
        self, query: str, bias: Optional[Coordinate] = None
    ) -> List[GeocodingHit]:
        return await self._geocoder.geocode(query, bias)

    async def reverse_geocode(self, query: PoiQuery, bbox: Bbox) -> List[PoiHit]:
        if self._poi_search is None:
            return []
        return await self._poi_search.search(query, bbox)
