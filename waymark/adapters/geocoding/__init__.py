"""Geocoding adapters - implementations of GeocoderPort."""

from .location_search import LocationSearchAdapter
from .nominatim_adapter import NominatimGeocoderAdapter

__all__ = ["LocationSearchAdapter", "NominatimGeocoderAdapter"]
