"""Synchronous single-channel action bus.

Receivers get every dispatched action in registration order. An action
dispatched while another one is still being delivered (typically from a
store listener) is queued and delivered after the current action has
reached every receiver, so reducers never run interleaved.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Protocol

from ..domain.actions import Action

logger = logging.getLogger(__name__)


class ActionReceiver(Protocol):
    def receive(self, action: Action) -> None:
        ...


class Dispatcher:
    def __init__(self) -> None:
        self._receivers: List[ActionReceiver] = []
        self._queue: Deque[Action] = deque()
        self._dispatching = False

    def register(self, receiver: ActionReceiver) -> None:
        if any(r is receiver for r in self._receivers):
            return
        self._receivers.append(receiver)

    def deregister(self, receiver: ActionReceiver) -> None:
        """Remove ``receiver``. Unknown receivers are ignored."""
        for i, r in enumerate(self._receivers):
            if r is receiver:
                del self._receivers[i]
                return

    @property
    def is_dispatching(self) -> bool:
        return self._dispatching

    def dispatch(self, action: Action) -> None:
        self._queue.append(action)
        if self._dispatching:
            logger.debug(
                "Queued nested dispatch",
                extra={"action": type(action).__name__},
            )
            return

        self._dispatching = True
        try:
            while self._queue:
                current = self._queue.popleft()
                # receivers may deregister themselves while handling
                for receiver in list(self._receivers):
                    receiver.receive(current)
        finally:
            self._dispatching = False
            self._queue.clear()
