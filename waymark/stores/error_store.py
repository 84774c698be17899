"""Last user-facing error, shown until dismissed."""

from __future__ import annotations

from dataclasses import dataclass

from ..domain.actions import Action, DismissLastError, RouteRequestFailed, RouteRequestSuccess
from .store import Store


@dataclass(frozen=True, slots=True)
class ErrorState:
    last_error: str = ""
    is_dismissed: bool = True


class ErrorStore(Store[ErrorState]):
    def __init__(self) -> None:
        super().__init__(ErrorState())

    def reduce(self, state: ErrorState, action: Action) -> ErrorState:
        if isinstance(action, RouteRequestFailed):
            return ErrorState(last_error=action.message, is_dismissed=False)
        if isinstance(action, (DismissLastError, RouteRequestSuccess)):
            if state.is_dismissed:
                return state
            return ErrorState(last_error=state.last_error, is_dismissed=True)
        return state
