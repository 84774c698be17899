"""Navigation adapters - implementations of NavigationPort."""

from .memory_history import InMemoryHistory

__all__ = ["InMemoryHistory"]
