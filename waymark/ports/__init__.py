"""Ports layer - Abstract interfaces (Protocols) for the client.

Ports define the contracts between the application core and external
adapters. They enable dependency injection and make the system testable.
"""

from .geocoding import GeocoderPort
from .navigation import NavigationPort
from .poi import PoiSearchPort
from .routing import RoutingPort

__all__ = [
    "RoutingPort",
    "GeocoderPort",
    "PoiSearchPort",
    "NavigationPort",
]
