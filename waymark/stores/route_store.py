"""Routing results and the currently selected itinerary."""

from __future__ import annotations

from ..domain.actions import (
    Action,
    AddPoint,
    ClearPoints,
    ClearRoute,
    MovePoint,
    RemovePoint,
    RouteRequestSuccess,
    SetPoint,
    SetQueryPoints,
    SetSelectedPath,
)
from ..domain.models import EMPTY_PATH, RouteStoreState
from .store import Store

INITIAL_STATE = RouteStoreState(all_paths=(), selected_path=EMPTY_PATH)


class RouteStore(Store[RouteStoreState]):
    def __init__(self) -> None:
        super().__init__(INITIAL_STATE)

    def reduce(self, state: RouteStoreState, action: Action) -> RouteStoreState:
        if isinstance(action, RouteRequestSuccess):
            paths = action.result.paths
            if not paths:
                return INITIAL_STATE
            return RouteStoreState(all_paths=paths, selected_path=paths[0])

        if isinstance(action, SetSelectedPath):
            # selection must stay an element of all_paths
            if not any(p is action.path for p in state.all_paths):
                match = next((p for p in state.all_paths if p == action.path), None)
                if match is None:
                    self._logger.warning(
                        "Ignoring selection of a path that is not part of the result",
                        extra={"path_id": action.path.path_id},
                    )
                    return state
                return RouteStoreState(all_paths=state.all_paths, selected_path=match)
            return RouteStoreState(all_paths=state.all_paths, selected_path=action.path)

        if isinstance(
            action,
            (SetPoint, AddPoint, RemovePoint, MovePoint, SetQueryPoints, ClearPoints, ClearRoute),
        ):
            return INITIAL_STATE

        return state
