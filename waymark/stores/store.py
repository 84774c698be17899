"""Generic reducer container."""

from __future__ import annotations

import abc
import logging
from typing import Callable, Generic, List, TypeVar

from ..domain.actions import Action

S = TypeVar("S")

Listener = Callable[[], None]


class Store(abc.ABC, Generic[S]):
    """Holds one immutable state value and replaces it on every action.

    Listeners are notified only when ``reduce`` returns a different object
    than the current state.
    """

    def __init__(self, initial_state: S) -> None:
        self._state = initial_state
        self._listeners: List[Listener] = []
        self._logger = logging.getLogger(type(self).__module__)

    @property
    def state(self) -> S:
        return self._state

    def register(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def deregister(self, listener: Listener) -> None:
        """Remove one registration of ``listener``; never re-adds it."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def receive(self, action: Action) -> None:
        new_state = self.reduce(self._state, action)
        if new_state is not self._state:
            self._state = new_state
            self._logger.debug(
                "State changed",
                extra={"store": type(self).__name__, "action": type(action).__name__},
            )
            for listener in list(self._listeners):
                listener()

    @abc.abstractmethod
    def reduce(self, state: S, action: Action) -> S:
        raise NotImplementedError
