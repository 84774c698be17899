"""Query points, profile and the route requests they trigger."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Sequence, Tuple

from ..domain.actions import (
    Action,
    AddPoint,
    ClearPoints,
    InvalidatePoint,
    MovePoint,
    RemovePoint,
    RouteRequestFailed,
    RouteRequestSuccess,
    SetCustomModel,
    SetPoint,
    SetQueryPoints,
    SetVehicleProfile,
)
from ..domain.models import (
    Coordinate,
    CurrentRequest,
    QueryPoint,
    QueryPointType,
    RequestState,
    RoutingArgs,
    SubRequest,
    coordinate_to_text,
)
from .store import Store


class RouteRequester(Protocol):
    def route_with_dispatch(self, args: RoutingArgs, zoom: bool) -> int:
        ...


@dataclass(frozen=True, slots=True)
class QueryStoreState:
    query_points: Tuple[QueryPoint, ...]
    next_query_point_id: int
    current_request: CurrentRequest = field(default_factory=CurrentRequest)
    routing_profile: str = "car"
    max_alternatives: int = 3
    custom_model: Optional[Mapping[str, Any]] = None

    @property
    def is_complete(self) -> bool:
        return len(self.query_points) >= 2 and all(
            p.is_initialized for p in self.query_points
        )

    def point_of_type(self, point_type: QueryPointType) -> Optional[QueryPoint]:
        return next((p for p in self.query_points if p.type == point_type), None)


def _with_types(points: Sequence[QueryPoint]) -> Tuple[QueryPoint, ...]:
    """Re-assign FROM to the first point, TO to the last and VIA in between."""
    last = len(points) - 1
    typed = []
    for i, point in enumerate(points):
        if i == 0:
            point_type = QueryPointType.FROM
        elif i == last:
            point_type = QueryPointType.TO
        else:
            point_type = QueryPointType.VIA
        typed.append(
            point if point.type == point_type else dataclasses.replace(point, type=point_type)
        )
    return tuple(typed)


class QueryStore(Store[QueryStoreState]):
    """Owns the query points and asks the gateway for a route when they are complete.

    Args:
        router: Issues route requests; None disables routing.
        profile: Initial routing profile.
        max_alternatives: Alternatives requested per route.
    """

    def __init__(
        self,
        router: Optional[RouteRequester] = None,
        profile: str = "car",
        max_alternatives: int = 3,
    ) -> None:
        self._router = router
        super().__init__(
            QueryStoreState(
                query_points=_with_types(
                    [QueryPoint(id=0), QueryPoint(id=1)]
                ),
                next_query_point_id=2,
                routing_profile=profile,
                max_alternatives=max_alternatives,
            )
        )

    def reduce(self, state: QueryStoreState, action: Action) -> QueryStoreState:
        if isinstance(action, AddPoint):
            point = QueryPoint(
                id=state.next_query_point_id,
                coordinate=action.coordinate or Coordinate(0.0, 0.0),
                query_text=action.query_text
                or (coordinate_to_text(action.coordinate) if action.coordinate else ""),
                is_initialized=action.coordinate is not None,
            )
            points = list(state.query_points)
            points.insert(max(0, min(action.at_index, len(points))), point)
            return self._route_if_ready(
                dataclasses.replace(
                    state,
                    query_points=_with_types(points),
                    next_query_point_id=state.next_query_point_id + 1,
                )
            )

        if isinstance(action, RemovePoint):
            if len(state.query_points) <= 2:
                points = [
                    QueryPoint(id=p.id, type=p.type) if p.id == action.point_id else p
                    for p in state.query_points
                ]
            else:
                points = [p for p in state.query_points if p.id != action.point_id]
            return self._route_if_ready(
                dataclasses.replace(state, query_points=_with_types(points))
            )

        if isinstance(action, SetPoint):
            points = [
                action.point if p.id == action.point.id else p
                for p in state.query_points
            ]
            return self._route_if_ready(
                dataclasses.replace(state, query_points=_with_types(points))
            )

        if isinstance(action, InvalidatePoint):
            points = [
                dataclasses.replace(p, is_initialized=False)
                if p.id == action.point_id
                else p
                for p in state.query_points
            ]
            return dataclasses.replace(state, query_points=tuple(points))

        if isinstance(action, MovePoint):
            points = list(state.query_points)
            moving = next((p for p in points if p.id == action.point_id), None)
            if moving is None:
                return state
            points.remove(moving)
            points.insert(max(0, min(action.new_index, len(points))), moving)
            return self._route_if_ready(
                dataclasses.replace(state, query_points=_with_types(points))
            )

        if isinstance(action, SetQueryPoints):
            points = list(action.points)
            next_id = max([state.next_query_point_id - 1, *(p.id for p in points)]) + 1
            while len(points) < 2:
                points.append(QueryPoint(id=next_id))
                next_id += 1
            return self._route_if_ready(
                dataclasses.replace(
                    state,
                    query_points=_with_types(points),
                    next_query_point_id=next_id,
                )
            )

        if isinstance(action, ClearPoints):
            next_id = state.next_query_point_id
            return dataclasses.replace(
                state,
                query_points=_with_types(
                    [QueryPoint(id=next_id), QueryPoint(id=next_id + 1)]
                ),
                next_query_point_id=next_id + 2,
                current_request=CurrentRequest(),
            )

        if isinstance(action, SetVehicleProfile):
            if action.profile == state.routing_profile:
                return state
            return self._route_if_ready(
                dataclasses.replace(state, routing_profile=action.profile)
            )

        if isinstance(action, SetCustomModel):
            return self._route_if_ready(
                dataclasses.replace(state, custom_model=action.custom_model)
            )

        if isinstance(action, (RouteRequestSuccess, RouteRequestFailed)):
            new_state = (
                RequestState.SUCCESS
                if isinstance(action, RouteRequestSuccess)
                else RequestState.FAILED
            )
            sub_requests = tuple(
                dataclasses.replace(r, state=new_state)
                if r.sequence == action.sequence
                else r
                for r in state.current_request.sub_requests
                # anything still pending from before was superseded
                if not (r.state == RequestState.SENT and r.sequence < action.sequence)
            )
            if sub_requests == state.current_request.sub_requests:
                return state
            return dataclasses.replace(
                state, current_request=CurrentRequest(sub_requests=sub_requests)
            )

        return state

    def build_routing_args(self, state: QueryStoreState) -> RoutingArgs:
        points = state.query_points
        return RoutingArgs(
            points=tuple((p.coordinate.lng, p.coordinate.lat) for p in points),
            profile=state.routing_profile,
            max_alternatives=state.max_alternatives,
            custom_model=state.custom_model,
            source_ref=points[0].location_ref,
            dest_ref=points[-1].location_ref,
        )

    def _route_if_ready(self, state: QueryStoreState) -> QueryStoreState:
        if self._router is None or not state.is_complete:
            return state
        args = self.build_routing_args(state)
        sequence = self._router.route_with_dispatch(args, True)
        self._logger.info(
            "Route requested",
            extra={"sequence": sequence, "points": len(args.points)},
        )
        return dataclasses.replace(
            state,
            current_request=CurrentRequest(
                sub_requests=(SubRequest(args=args, sequence=sequence),)
            ),
        )
