"""In-memory browser history.

Headless NavigationPort used by the CLI and the tests. Entries behave
like a browser session history: pushing after going back drops the
forward entries.
"""

from __future__ import annotations

import logging
from typing import Callable, List


class InMemoryHistory:
    def __init__(self, initial_url: str) -> None:
        self._entries: List[str] = [initial_url]
        self._index = 0
        self._listeners: List[Callable[[], None]] = []
        self._logger = logging.getLogger(__name__)

    @property
    def href(self) -> str:
        return self._entries[self._index]

    @property
    def entries(self) -> List[str]:
        return list(self._entries)

    def replace_state(self, url: str) -> None:
        self._entries[self._index] = url

    def push_state(self, url: str) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(url)
        self._index += 1
        self._logger.debug("History push", extra={"url": url, "length": len(self._entries)})

    def on_pop_state(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def back(self) -> None:
        if self._index > 0:
            self._index -= 1
            self._fire()

    def forward(self) -> None:
        if self._index < len(self._entries) - 1:
            self._index += 1
            self._fire()

    def _fire(self) -> None:
        for callback in list(self._listeners):
            callback()
