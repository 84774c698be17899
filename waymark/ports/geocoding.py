"""Geocoding port - Abstraction for text-to-location search.

This protocol defines the contract for geocoding services, allowing
different implementations (location search API, Nominatim) to be used.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Protocol

if TYPE_CHECKING:
    from ..domain.models import Coordinate, GeocodingHit


class GeocoderPort(Protocol):
    """Port for forward geocoding.

    Implementations:
    - adapters/geocoding/location_search.py (LocationSearchAdapter)
    - adapters/geocoding/nominatim_adapter.py (NominatimGeocoderAdapter)
    """

    async def geocode(
        self, query: str, bias: Optional[Coordinate] = None
    ) -> List[GeocodingHit]:
        """Search locations matching a free-text query.

        Args:
            query: The text typed by the user (e.g., "Mumbai").
            bias: Optional coordinate to prefer nearby results.

        Returns:
            Hits ordered by relevance, possibly empty.

        Raises:
            NetworkError: If the service cannot be reached.
        """
        ...
