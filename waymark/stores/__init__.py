"""Stores layer - Dispatcher and reducer containers.

Stores own the application state. They are registered on the Dispatcher
and notify their listeners whenever an action produces a new state.
"""

from .dispatcher import ActionReceiver, Dispatcher
from .error_store import ErrorState, ErrorStore
from .map_options_store import MapOptionsState, MapOptionsStore
from .query_store import QueryStore, QueryStoreState, RouteRequester
from .route_store import RouteStore
from .settings_store import PathDisplayMode, Settings, SettingsStore
from .store import Store

__all__ = [
    "Dispatcher",
    "ActionReceiver",
    "Store",
    "QueryStore",
    "QueryStoreState",
    "RouteRequester",
    "RouteStore",
    "SettingsStore",
    "Settings",
    "PathDisplayMode",
    "MapOptionsStore",
    "MapOptionsState",
    "ErrorStore",
    "ErrorState",
]
