"""POI port - Reverse search for points of interest inside a bounding box."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Protocol

if TYPE_CHECKING:
    from ..domain.models import Bbox, PoiHit
    from ..services.address_parse import PoiQuery


class PoiSearchPort(Protocol):
    """Port for POI search.

    Implementation: adapters/poi/overpass_adapter.py
    """

    async def search(self, query: PoiQuery, bbox: Bbox) -> List[PoiHit]:
        """Find POIs matching ``query`` inside ``bbox``.

        Args:
            query: Tag filters describing the wanted POIs.
            bbox: Search area as (minLon, minLat, maxLon, maxLat).

        Returns:
            Matching POIs, possibly empty.
        """
        ...
