"""Navigation port - The browser location and history.

URLStateSync reads the current address and writes new history entries
through this port; the browser (or InMemoryHistory) sits behind it.
"""

from __future__ import annotations

from typing import Callable, Protocol


class NavigationPort(Protocol):
    """Port for the address bar and session history.

    Implementation: adapters/navigation/memory_history.py
    """

    @property
    def href(self) -> str:
        """The current absolute URL."""
        ...

    def replace_state(self, url: str) -> None:
        """Replace the current history entry with ``url``."""
        ...

    def push_state(self, url: str) -> None:
        """Append ``url`` as a new history entry."""
        ...

    def on_pop_state(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` whenever the user navigates back or forward."""
        ...
