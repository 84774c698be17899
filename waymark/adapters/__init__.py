"""Adapters layer - Concrete implementations of ports.

This module contains implementations of the port interfaces,
connecting the client to external systems like:
- Routing backends (segmented routes API, polyline route API)
- Geocoding services (location search API, Nominatim)
- POI search (Overpass)
- Browser history (in-memory)
"""
