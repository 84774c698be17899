"""Services layer - Orchestration between stores and ports.

Services sit between the stores and the adapters:
- RoutingGateway: route requests with out-of-order response handling
- DebouncedGeocoder: autocomplete geocoding while typing
- URLStateSync: address bar <-> state synchronisation
- AddressParseResult: POI recognition in free text
"""

from .address_parse import AddressParseResult, PoiAndQuery, PoiPhrase, PoiQuery
from .gateway import RoutingGateway
from .geocoder import DebouncedGeocoder, filter_duplicates
from .url_sync import URLStateSync, create_url, parse_points

__all__ = [
    "RoutingGateway",
    "DebouncedGeocoder",
    "filter_duplicates",
    "URLStateSync",
    "create_url",
    "parse_points",
    "AddressParseResult",
    "PoiQuery",
    "PoiAndQuery",
    "PoiPhrase",
]
