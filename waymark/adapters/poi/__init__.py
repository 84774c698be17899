"""POI adapters - implementations of PoiSearchPort."""

from .overpass_adapter import OverpassPoiAdapter, build_overpass_query, clamp_bbox

__all__ = ["OverpassPoiAdapter", "build_overpass_query", "clamp_bbox"]
